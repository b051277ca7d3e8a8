"""Chart integration: host contracts, lifecycle plugin and overlays."""

from .plugin import DatasourcePlugin

__all__ = ["DatasourcePlugin"]

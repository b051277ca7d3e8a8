"""
promchart Python package.

This package hosts the chart datasource plugin that keeps a drawable chart in
sync with a Prometheus-compatible backend, the query adapters it dispatches
through, and supporting utilities. See README.md for usage.
"""

from .__version__ import __version__

__all__ = ["__version__"]

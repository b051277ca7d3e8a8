"""Canonical data model shared by adapters, the merger and the chart plugin.

Query results mirror the Prometheus ``matrix`` shape: an ordered list of
series, each made of a metric identity and ordered samples. Datasets are the
render-ready form handed to the chart, one per series.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Metric(BaseModel):
    """Identity of a series.

    Attributes
    ----------
    name: Optional[str]
        Value of the ``__name__`` label, when the series kept one.
    labels: Dict[str, str]
        Remaining labels, in the order returned by the backend.
    """

    name: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_labels(cls, raw: Dict[str, str]) -> "Metric":
        """Split a raw Prometheus label set into name and labels."""
        labels = dict(raw)
        name = labels.pop("__name__", None)
        return cls(name=name, labels=labels)

    @property
    def is_empty(self) -> bool:
        return not self.name and not self.labels

    def __str__(self) -> str:
        inner = ", ".join(f'{k}="{v}"' for k, v in self.labels.items())
        return f"{self.name or ''}{{{inner}}}"


class Sample(BaseModel):
    """Single ``(time, value)`` observation."""

    time: datetime
    value: float


class Serie(BaseModel):
    """One time-ordered sequence of samples for a label set."""

    metric: Metric = Field(default_factory=Metric)
    values: List[Sample] = Field(default_factory=list)


class QueryResult(BaseModel):
    """Result of a single range query.

    Attributes
    ----------
    result_type: str
        Prometheus result type; range queries always return ``"matrix"``.
    result: List[Serie]
        Series in backend order.
    """

    result_type: str = "matrix"
    result: List[Serie] = Field(default_factory=list)


class Point(BaseModel):
    """Chart point. ``y`` is ``None`` for an inserted gap."""

    x: datetime
    y: Optional[float] = None


class Dataset(BaseModel):
    """Render-ready series with styling and visibility attached."""

    label: str
    data: List[Point] = Field(default_factory=list)
    tension: float = 0.4
    cubic_interpolation_mode: str = "default"
    stepped: bool = False
    fill: bool = False
    background_color: str = "transparent"
    border_color: str = ""
    border_width: int = 3
    hidden: bool = False

"""Default options shared by the function-plotting helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True)
class PlotConfig:
    """Immutable options for sampling and table assembly.

    Parameters
    ----------
    samples : int
        Number of intervals each function is sampled on; ``samples + 1``
        points are produced per series.
    x_column, y_column : str
        Column names of the abscissa and the function values.
    label_column : str
        Column holding the series label of every row.
    label_template : str
        ``str.format`` template used to name opaque callables. Receives the
        1-based position of the function as ``index``.
    """

    samples: int = 250
    x_column: str = "x"
    y_column: str = "f(x)"
    label_column: str = "f"
    label_template: str = "f_{index}"

    def __post_init__(self) -> None:
        if isinstance(self.samples, bool) or not isinstance(self.samples, int):
            raise TypeError(f"samples must be an int, got {type(self.samples).__name__}")
        if self.samples < 1:
            raise ValueError(f"samples must be positive, got {self.samples}")
        columns = (self.x_column, self.y_column, self.label_column)
        if len(set(columns)) != len(columns):
            raise ValueError(f"Column names must be distinct, got {columns!r}")

    def with_options(self, **changes: Any) -> "PlotConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def label_for(self, index: int) -> str:
        """Return the synthetic label of the ``index``-th (1-based) callable."""
        return self.label_template.format(index=index)


DEFAULT_CONFIG = PlotConfig()


__all__ = ["DEFAULT_CONFIG", "PlotConfig"]

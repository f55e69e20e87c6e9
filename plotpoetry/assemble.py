"""Assembly of sampled functions into a labeled table and aesthetic mapping.

Purpose
-------
``datafy`` is the step between sampling and rendering: it samples every
function, tags the rows of each series with a label, stacks the series into
one ``pandas.DataFrame`` and derives the mapping the grammar layer needs.

Gotchas
-------
- Labels are not identities. Two inputs with the same label (for example the
  same expression given twice) keep all of their rows and share one color.
- The label column is categorical with categories in first-seen input order,
  which is also the legend order.
"""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from .config import DEFAULT_CONFIG, PlotConfig
from .normalization import FunctionSpec, normalize_function, normalize_functions
from .sampling import evaluate

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def evalfunc(f: Any, a: Any, b: Any, n: int, *, config: PlotConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Return a table of ``f`` sampled at ``n + 1`` points over ``[a, b]``.

    Parameters
    ----------
    f : callable, sympy.Expr, or str
        Function or expression to evaluate.
    a, b : number
        Lower and upper bound.
    n : int
        Number of intervals.

    Returns
    -------
    pandas.DataFrame
        Columns ``config.x_column`` (``"x"``) and ``config.y_column`` (``"f(x)"``).
    """
    xs, ys = evaluate(normalize_function(f), a, b, n)
    return pd.DataFrame({config.x_column: xs, config.y_column: ys})


def default_mapping(count: int, *, config: PlotConfig = DEFAULT_CONFIG) -> dict[str, str]:
    """Return the derived mapping for ``count`` plotted functions."""
    mapping = {"x": config.x_column, "y": config.y_column}
    if count > 1:
        mapping["color"] = config.label_column
    return mapping


def datafy(fs: Any, a: Any, b: Any, *, config: PlotConfig = DEFAULT_CONFIG) -> tuple[pd.DataFrame, dict[str, str]]:
    """Sample one or more functions into a single labeled table.

    Parameters
    ----------
    fs : callable, sympy.Expr, str, or list of those
        Functions to sample, in legend order.
    a, b : number
        Interval bounds shared by all functions.
    config : PlotConfig, optional
        Sample count, column names and the synthetic label template.

    Returns
    -------
    tuple
        ``(table, mapping)``. ``table`` has ``len(specs) * (config.samples + 1)``
        rows; ``mapping`` maps ``x``/``y`` to the sample columns and, for more
        than one function, ``color`` to the label column.

    Examples
    --------
    >>> import sympy as sp
    >>> x = sp.Symbol("x")
    >>> table, mapping = datafy([sp.sin(x), lambda t: t], 0, 1)
    >>> table.shape, mapping
    ((502, 3), {'x': 'x', 'y': 'f(x)', 'color': 'f'})
    >>> list(table["f"].cat.categories)
    ['sin(x)', 'f_2']
    """
    specs: list[FunctionSpec] = normalize_functions(fs)
    frames: list[pd.DataFrame] = []
    levels: list[str] = []
    for index, spec in enumerate(specs, start=1):
        frame = evalfunc(spec, a, b, config.samples, config=config)
        label = spec.label(index, config)
        frame[config.label_column] = label
        frames.append(frame)
        if label not in levels:
            levels.append(label)

    table = pd.concat(frames, ignore_index=True)
    table[config.label_column] = pd.Categorical(table[config.label_column], categories=levels)
    mapping = default_mapping(len(specs), config=config)

    logger.debug("datafy assembled %d series (%d rows), labels=%s", len(specs), len(table), levels)
    return table, mapping


__all__ = ["datafy", "default_mapping", "evalfunc"]

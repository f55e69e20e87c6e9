"""Convenience plots of functions, expressions and matrices.

Purpose
-------
Shortcuts over the generic :func:`plotpoetry.grammar.plot` call for the most
common mathematical pictures:

- ``plot(f, a, b)`` draws one or more functions as lines over ``[a, b]``,
- ``layer(f, a, b)`` builds the same lines as a layer for composing plots,
- ``spy(M)`` draws the nonzero entries of a matrix as a heat grid.

Functions may be Python callables, SymPy expressions in one variable, or
expression strings, alone or in a list.

Examples
--------
>>> import math
>>> import sympy as sp
>>> from plotpoetry import Guide, plot, layer
>>> x = sp.Symbol("x")
>>> fig = plot([sp.sin(x), "cos(x)"], 0, "2*pi", Guide.title("Trig"))
>>> [trace.name for trace in fig.data]
['sin(x)', 'cos(x)']
>>> fig = plot(math.exp, 0, 1, layer(lambda t: 1 + t, 0, 1))
>>> len(fig.data)
2
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import scipy.sparse

from . import grammar
from .assemble import datafy
from .config import DEFAULT_CONFIG, PlotConfig
from .grammar import Coord, Element, Geom, Layer, Scale, Stat
from .overrides import Overrides

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def plot(
    fs: Any,
    a: Any,
    b: Any,
    *elements: Element | Layer,
    config: PlotConfig = DEFAULT_CONFIG,
    **mapping: str | None,
) -> go.Figure:
    """Plot one or more functions over ``[a, b]`` as lines.

    Parameters
    ----------
    fs : callable, sympy.Expr, str, or list of those
        Functions to plot. With more than one, lines are colored by function.
    a, b : number, SymPy number, or str
        Lower and upper bound on x.
    *elements : Element or Layer
        Extra grammar elements (scales, guides, ...) or layers to draw too.
    config : PlotConfig, optional
        Sample count, column names and label template.
    **mapping : str or None
        Aesthetic overrides, e.g. ``color="f"``. They win over the derived
        mapping; ``None`` removes a role.

    Returns
    -------
    plotly.graph_objects.Figure
    """
    table, derived = datafy(fs, a, b, config=config)
    overrides = Overrides.from_call(elements, mapping)
    return grammar.plot(
        table,
        *overrides.combine_elements((Geom.line,)),
        mapping=overrides.merge_mapping(derived),
    )


def layer(
    fs: Any,
    a: Any,
    b: Any,
    *elements: Element,
    config: PlotConfig = DEFAULT_CONFIG,
    **mapping: str | None,
) -> Layer:
    """Build a line layer of one or more functions over ``[a, b]``.

    The layer carries its data as is (``Stat.nil``) and draws with
    ``Geom.line``; pass it to :func:`plot` or :func:`plotpoetry.grammar.plot`.
    Extra ``Geom``/``Stat`` elements and mapping overrides are accepted as in
    :func:`plot`.
    """
    table, derived = datafy(fs, a, b, config=config)
    overrides = Overrides.from_call(elements, mapping)
    return grammar.layer(
        table,
        *overrides.combine_elements((Stat.nil, Geom.line)),
        mapping=overrides.merge_mapping(derived),
    )


SPY_MAPPING = {"x": "j", "y": "i", "color": "value"}


def nonzeros(M: Any) -> pd.DataFrame:
    """Return the nonzero entries of a matrix as an ``(i, j, value)`` table.

    ``M`` may be any 2-D array-like or a ``scipy.sparse`` matrix/array.
    Indices are 0-based. Explicitly stored zeros of sparse input are dropped.

    Raises
    ------
    ValueError
        If ``M`` is not two-dimensional.
    """
    if not scipy.sparse.issparse(M):
        M = np.asarray(M)
    if len(M.shape) != 2:
        raise ValueError(f"spy() expects a 2-D matrix, got shape {M.shape}")
    rows, cols, values = scipy.sparse.find(M)
    return pd.DataFrame({"i": rows, "j": cols, "value": values})


def spy(M: Any, *elements: Element | Layer, **mapping: str | None) -> go.Figure:
    """Draw the nonzero entries of a matrix as a heat grid.

    Rows run top to bottom (flipped y axis); both axes are discrete and the
    cell color encodes the entry value. Caller elements are applied after the
    fixed ones and mapping overrides win over ``x="j", y="i", color="value"``.

    Examples
    --------
    >>> sorted(nonzeros([[0, 1], [2, 0]]).itertuples(index=False, name=None))
    [(0, 1, 1), (1, 0, 2)]
    """
    table = nonzeros(M)
    logger.debug("spy found %d nonzero entries", len(table))
    overrides = Overrides.from_call(elements, mapping)
    fixed = (
        Coord.cartesian(yflip=True),
        Scale.continuous_color,
        Scale.x_discrete,
        Scale.y_discrete,
        Geom.rectbin,
        Stat.identity,
    )
    return grammar.plot(
        table,
        *overrides.combine_elements(fixed),
        mapping=overrides.merge_mapping(SPY_MAPPING),
    )


__all__ = ["SPY_MAPPING", "layer", "nonzeros", "plot", "spy"]

"""Grammar-of-graphics entry points rendered with Plotly.

Purpose
-------
This module provides the generic ``plot``/``layer`` calls that the function
helpers in :mod:`plotpoetry.poetry` delegate to. A plot is described by a
data table, an aesthetic mapping (plot role -> column name) and a sequence of
*elements*:

- ``Geom`` elements choose how rows are drawn (lines, points, rectangles),
- ``Stat`` elements transform the table before drawing,
- ``Scale``, ``Coord`` and ``Guide`` elements configure axes, colors and titles.

Architecture
------------
Elements are immutable values; calling one returns a copy with updated
parameters, so ``Coord.cartesian`` and ``Coord.cartesian(yflip=True)`` are
both valid elements. Rendering is a single pass: every layer contributes
Plotly traces, then figure-level elements update the layout in the order they
were given, so a later scale or coordinate element overrides an earlier one.
Geometry elements never override each other; each one draws.

Examples
--------
>>> import pandas as pd
>>> from plotpoetry.grammar import Geom, Guide, plot
>>> df = pd.DataFrame({"t": [0, 1, 2], "v": [1, 3, 2]})
>>> fig = plot(df, Geom.line, Guide.title("Trend"), x="t", y="v")
>>> len(fig.data), fig.layout.title.text
(1, 'Trend')
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import pandas as pd
import plotly.graph_objects as go

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


# SECTION: Elements [id: Elements]
# =============================================================================

@dataclass(frozen=True)
class Element:
    """One grammar-of-graphics element.

    Attributes
    ----------
    family : str
        ``"geom"``, ``"stat"``, ``"scale"``, ``"coord"`` or ``"guide"``.
    name : str
        Element name within its family, e.g. ``"line"``.
    params : tuple
        Sorted ``(key, value)`` pairs configuring the element.
    accepts : frozenset or None
        Allowed parameter names; ``None`` accepts any (geometries forward
        unknown keys to the Plotly trace).
    positional : tuple of str
        Parameter names that may be passed positionally.
    """

    family: str
    name: str
    params: tuple[tuple[str, Any], ...] = ()
    accepts: Optional[frozenset[str]] = field(default=frozenset(), compare=False, repr=False)
    positional: tuple[str, ...] = field(default=(), compare=False, repr=False)

    def __call__(self, *args: Any, **params: Any) -> "Element":
        """Return a copy of this element with ``params`` applied."""
        if len(args) > len(self.positional):
            raise TypeError(
                f"{self} takes at most {len(self.positional)} positional argument(s), got {len(args)}"
            )
        for key, value in zip(self.positional, args):
            if key in params:
                raise TypeError(f"{self} got multiple values for {key!r}")
            params[key] = value
        if self.accepts is not None:
            unknown = set(params) - self.accepts
            if unknown:
                raise TypeError(
                    f"{self} got unexpected parameter(s): {', '.join(sorted(unknown))}"
                )
        merged = dict(self.params)
        merged.update(params)
        return replace(self, params=tuple(sorted(merged.items())))

    def __str__(self) -> str:
        return f"{self.family.capitalize()}.{self.name}"

    @property
    def options(self) -> dict[str, Any]:
        """Parameters as a dict."""
        return dict(self.params)

    def get(self, key: str, default: Any = None) -> Any:
        return self.options.get(key, default)


_RANGE = frozenset({"minvalue", "maxvalue"})


class Geom:
    """Geometries. Extra keyword parameters are forwarded to the Plotly trace."""

    line = Element("geom", "line", accepts=None)
    point = Element("geom", "point", accepts=None)
    rectbin = Element("geom", "rectbin", accepts=None)


class Stat:
    """Statistics applied to a layer's table before drawing."""

    identity = Element("stat", "identity")
    nil = Element("stat", "nil")


class Scale:
    """Axis and color scales."""

    x_continuous = Element("scale", "x_continuous", accepts=_RANGE)
    y_continuous = Element("scale", "y_continuous", accepts=_RANGE)
    x_log10 = Element("scale", "x_log10", accepts=_RANGE)
    y_log10 = Element("scale", "y_log10", accepts=_RANGE)
    x_discrete = Element("scale", "x_discrete")
    y_discrete = Element("scale", "y_discrete")
    continuous_color = Element(
        "scale", "continuous_color", accepts=_RANGE | {"colorscale"}, positional=("colorscale",)
    )


class Coord:
    """Coordinate systems."""

    cartesian = Element(
        "coord",
        "cartesian",
        accepts=frozenset({"xmin", "xmax", "ymin", "ymax", "xflip", "yflip"}),
    )


class Guide:
    """Titles and axis labels."""

    title = Element("guide", "title", accepts=frozenset({"text"}), positional=("text",))
    xlabel = Element("guide", "xlabel", accepts=frozenset({"text"}), positional=("text",))
    ylabel = Element("guide", "ylabel", accepts=frozenset({"text"}), positional=("text",))


_LAYER_FAMILIES = ("geom", "stat")
_FIGURE_FAMILIES = ("scale", "coord", "guide")


# SECTION: Layers [id: Layers]
# =============================================================================

@dataclass(frozen=True)
class Layer:
    """A data table drawn with a mapping, statistics and geometries."""

    data: pd.DataFrame = field(compare=False)
    mapping: Mapping[str, str]
    geoms: tuple[Element, ...] = (Geom.point,)
    stats: tuple[Element, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.data, pd.DataFrame):
            raise TypeError(f"Layer data must be a pandas DataFrame, got {type(self.data).__name__}")
        object.__setattr__(self, "mapping", dict(self.mapping))
        if not self.geoms:
            object.__setattr__(self, "geoms", (Geom.point,))

    def prepared_data(self) -> pd.DataFrame:
        """Return the table after applying this layer's statistics."""
        data = self.data
        for stat in self.stats:
            data = _STATS[stat.name](data, self.mapping)
        return data


def layer(data: pd.DataFrame, *elements: Element, mapping: Mapping[str, str] | None = None, **aes: str) -> Layer:
    """Create a :class:`Layer` from a table, geometry/statistic elements and a mapping.

    The mapping is ``mapping`` updated with the ``aes`` keywords, e.g.
    ``layer(df, Geom.line, x="t", y="v")``.

    Raises
    ------
    TypeError
        If an element is not a ``Geom`` or ``Stat`` element.
    """
    geoms, stats = _split_layer_elements(elements, caller="layer()")
    return Layer(data=data, mapping=_mapping(mapping, aes), geoms=geoms, stats=stats)


# SECTION: plot [id: plot]
# =============================================================================

def plot(*args: Any, mapping: Mapping[str, str] | None = None, **aes: str) -> go.Figure:
    """Render a table and/or layers into a Plotly figure.

    Parameters
    ----------
    *args
        Optionally a ``pandas.DataFrame`` first, then any mix of
        :class:`Layer` objects and elements. ``Geom``/``Stat`` elements apply
        to the table given first; ``Scale``/``Coord``/``Guide`` elements apply
        to the whole figure in order.
    mapping, **aes
        Aesthetic mapping of the leading table.

    Returns
    -------
    plotly.graph_objects.Figure

    Raises
    ------
    TypeError
        If an argument is neither a table, a layer, nor an element, or a table
        is not the first argument.
    ValueError
        If there is nothing to draw, or a mapped role/column is missing.
    """
    data: pd.DataFrame | None = None
    rest = args
    if args and isinstance(args[0], pd.DataFrame):
        data, rest = args[0], args[1:]

    layers: list[Layer] = []
    layer_elements: list[Element] = []
    figure_elements: list[Element] = []
    for arg in rest:
        if isinstance(arg, Layer):
            layers.append(arg)
        elif isinstance(arg, Element) and arg.family in _LAYER_FAMILIES:
            layer_elements.append(arg)
        elif isinstance(arg, Element) and arg.family in _FIGURE_FAMILIES:
            figure_elements.append(arg)
        elif isinstance(arg, pd.DataFrame):
            raise TypeError("plot() accepts a data table only as its first argument")
        else:
            raise TypeError(
                f"plot() arguments must be layers or grammar elements, got {type(arg).__name__}"
            )

    if data is not None:
        geoms, stats = _split_layer_elements(layer_elements, caller="plot()")
        layers.insert(0, Layer(data=data, mapping=_mapping(mapping, aes), geoms=geoms, stats=stats))
    elif layer_elements or mapping or aes:
        raise ValueError("plot() received geometry, statistic or mapping arguments without a data table")

    if not layers:
        raise ValueError("plot() needs a data table or at least one layer")

    fig = go.Figure()
    for lyr in layers:
        _render_layer(fig, lyr)
    _apply_default_guides(fig, layers[0].mapping)
    for element in figure_elements:
        _FIGURE_ELEMENTS[element.family](fig, element, layers[0].mapping)

    logger.debug("plot rendered %d layer(s) into %d trace(s)", len(layers), len(fig.data))
    return fig


# SECTION: Rendering helpers [id: Rendering]
# =============================================================================

def _mapping(mapping: Mapping[str, str] | None, aes: Mapping[str, str]) -> dict[str, str]:
    merged = dict(mapping or {})
    merged.update(aes)
    return merged


def _split_layer_elements(elements: Any, *, caller: str) -> tuple[tuple[Element, ...], tuple[Element, ...]]:
    geoms: list[Element] = []
    stats: list[Element] = []
    for element in elements:
        if isinstance(element, Element) and element.family == "geom":
            geoms.append(element)
        elif isinstance(element, Element) and element.family == "stat":
            stats.append(element)
        else:
            raise TypeError(f"{caller} expects Geom or Stat elements, got {element!r}")
    return tuple(geoms), tuple(stats)


def _require(data: pd.DataFrame, mapping: Mapping[str, str], roles: tuple[str, ...], geom: Element) -> None:
    missing_roles = [role for role in roles if role not in mapping]
    if missing_roles:
        raise ValueError(f"{geom} requires mapping role(s): {', '.join(missing_roles)}")
    missing_columns = [mapping[role] for role in mapping if mapping[role] not in data.columns]
    if missing_columns:
        raise ValueError(
            f"Mapped column(s) not in data: {', '.join(map(repr, missing_columns))}. "
            f"Available columns: {', '.join(map(repr, data.columns))}"
        )


def _groups(data: pd.DataFrame, color: str | None) -> Iterator[tuple[str | None, pd.DataFrame]]:
    """Yield ``(label, rows)`` per color level, in category or first-seen order.

    Rows with a missing color form their own ``"nan"`` group.
    """
    if color is None:
        yield None, data
        return
    for level, rows in data.groupby(color, sort=False, observed=True, dropna=False):
        yield ("nan" if pd.isna(level) else str(level)), rows


def _scatter(mode: str) -> Callable[[go.Figure, pd.DataFrame, Mapping[str, str], Element], None]:
    def draw(fig: go.Figure, data: pd.DataFrame, mapping: Mapping[str, str], geom: Element) -> None:
        _require(data, mapping, ("x", "y"), geom)
        for label, rows in _groups(data, mapping.get("color")):
            trace: dict[str, Any] = {
                "x": rows[mapping["x"]].to_numpy(),
                "y": rows[mapping["y"]].to_numpy(),
                "mode": mode,
                "name": label,
                "legendgroup": label,
                "showlegend": label is not None,
            }
            trace.update(geom.options)
            fig.add_trace(go.Scatter(**trace))

    return draw


def _rectbin(fig: go.Figure, data: pd.DataFrame, mapping: Mapping[str, str], geom: Element) -> None:
    _require(data, mapping, ("x", "y"), geom)
    color = mapping.get("color")
    z = data[color].to_numpy() if color is not None else [1] * len(data)
    trace: dict[str, Any] = {
        "x": data[mapping["x"]].to_numpy(),
        "y": data[mapping["y"]].to_numpy(),
        "z": z,
        "coloraxis": "coloraxis",
    }
    trace.update(geom.options)
    fig.add_trace(go.Heatmap(**trace))
    if color is not None:
        fig.update_layout(coloraxis_colorbar_title_text=color)


_GEOMS = {
    "line": _scatter("lines"),
    "point": _scatter("markers"),
    "rectbin": _rectbin,
}

# Both statistics hand the table through; ``nil`` marks data that is already final.
_STATS: dict[str, Callable[[pd.DataFrame, Mapping[str, str]], pd.DataFrame]] = {
    "identity": lambda data, mapping: data,
    "nil": lambda data, mapping: data,
}


def _render_layer(fig: go.Figure, lyr: Layer) -> None:
    data = lyr.prepared_data()
    for geom in lyr.geoms:
        _GEOMS[geom.name](fig, data, lyr.mapping, geom)


def _apply_default_guides(fig: go.Figure, mapping: Mapping[str, str]) -> None:
    if "x" in mapping:
        fig.update_xaxes(title_text=mapping["x"])
    if "y" in mapping:
        fig.update_yaxes(title_text=mapping["y"])
    if "color" in mapping:
        fig.update_layout(legend_title_text=mapping["color"])


def _axis_range(element: Element, low: str, high: str) -> dict[str, Any]:
    lo, hi = element.get(low), element.get(high)
    if lo is None and hi is None:
        return {}
    return {"range": [lo, hi], "autorange": False}


def _apply_scale(fig: go.Figure, element: Element, mapping: Mapping[str, str]) -> None:
    name = element.name
    if name == "continuous_color":
        coloraxis: dict[str, Any] = {"colorscale": element.get("colorscale", "Viridis")}
        if element.get("minvalue") is not None:
            coloraxis["cmin"] = element.get("minvalue")
        if element.get("maxvalue") is not None:
            coloraxis["cmax"] = element.get("maxvalue")
        fig.update_layout(coloraxis=coloraxis)
        return

    axis, kind = name.split("_", 1)
    update = fig.update_xaxes if axis == "x" else fig.update_yaxes
    if kind == "discrete":
        update(type="category", categoryorder="category ascending")
    elif kind == "log10":
        rng = _axis_range(element, "minvalue", "maxvalue")
        if rng:
            # Plotly log-axis ranges are given in exponents.
            rng["range"] = [None if v is None else math.log10(v) for v in rng["range"]]
        update(type="log", **rng)
    else:
        update(type="linear", **_axis_range(element, "minvalue", "maxvalue"))


def _apply_coord(fig: go.Figure, element: Element, mapping: Mapping[str, str]) -> None:
    for axis, update in (("x", fig.update_xaxes), ("y", fig.update_yaxes)):
        rng = _axis_range(element, f"{axis}min", f"{axis}max")
        if element.get(f"{axis}flip", False):
            if rng:
                rng["range"] = rng["range"][::-1]
            else:
                rng = {"autorange": "reversed"}
        if rng:
            update(**rng)


def _apply_guide(fig: go.Figure, element: Element, mapping: Mapping[str, str]) -> None:
    text = element.get("text")
    if element.name == "title":
        fig.update_layout(title_text=text)
    elif element.name == "xlabel":
        fig.update_xaxes(title_text=text)
    else:
        fig.update_yaxes(title_text=text)


_FIGURE_ELEMENTS = {
    "scale": _apply_scale,
    "coord": _apply_coord,
    "guide": _apply_guide,
}


__all__ = ["Coord", "Element", "Geom", "Guide", "Layer", "Scale", "Stat", "layer", "plot"]

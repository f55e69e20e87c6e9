"""Top-level public API for the ``plotpoetry`` package.

This module re-exports the convenience surface so users can import from a
single namespace, for example:

>>> from plotpoetry import Geom, plot, spy  # doctest: +SKIP

It exposes both the function-plotting helpers and the lower-level building
blocks (grammar elements, sampling and table assembly) for custom plots.
"""

from . import grammar
from .assemble import datafy, default_mapping, evalfunc
from .config import DEFAULT_CONFIG, PlotConfig
from .grammar import Coord, Element, Geom, Guide, Layer, Scale, Stat
from .normalization import FunctionKind, FunctionSpec, normalize_function, normalize_functions
from .numpify import numpify
from .overrides import Overrides
from .poetry import layer, nonzeros, plot, spy
from .sampling import evaluate, sample_points

__all__ = [
    "Coord",
    "DEFAULT_CONFIG",
    "Element",
    "FunctionKind",
    "FunctionSpec",
    "Geom",
    "Guide",
    "Layer",
    "Overrides",
    "PlotConfig",
    "Scale",
    "Stat",
    "datafy",
    "default_mapping",
    "evalfunc",
    "evaluate",
    "grammar",
    "layer",
    "nonzeros",
    "normalize_function",
    "normalize_functions",
    "numpify",
    "plot",
    "sample_points",
    "spy",
]

"""Function input normalization for the plotting helpers.

Purpose
-------
This module converts the accepted function-argument forms of
:func:`plotpoetry.plot` and friends into an ordered list of
:class:`FunctionSpec` values. Each spec is tagged with its kind, so that the
sampler and assembler never branch on raw user input.

Accepted forms
--------------
- a Python callable of one argument,
- a SymPy expression in one free variable, a one-variable ``Lambda``, or a
  SymPy function class such as ``sympy.sin`` (applied to ``x``),
- an expression string parsed with :func:`sympy.sympify` (``"sin(x)"``),
- a list or tuple of any of the above.

Examples
--------
>>> import sympy as sp
>>> from plotpoetry.normalization import normalize_functions
>>> x = sp.Symbol("x")
>>> specs = normalize_functions([sp.sin(x), abs])
>>> [spec.kind.value for spec in specs]
['expression', 'callable']
>>> specs[0].label(1), specs[1].label(2)
('sin(x)', 'f_2')
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import sympy as sp
from sympy.core.expr import Expr
from sympy.core.function import FunctionClass

from .config import DEFAULT_CONFIG, PlotConfig
from .numpify import DEFAULT_VARIABLE, numpify


class FunctionKind(enum.Enum):
    """Tag of a normalized function input."""

    CALLABLE = "callable"
    EXPRESSION = "expression"


@dataclass(frozen=True)
class FunctionSpec:
    """One function to sample, tagged with how it was supplied.

    Attributes
    ----------
    kind : FunctionKind
        Whether the input was an opaque callable or a symbolic expression.
    fn : Callable
        The callable evaluated by the sampler. For expressions this is the
        NumPy function compiled by :func:`plotpoetry.numpify.numpify`.
    text : str or None
        Textual form of an expression, used as its label.
    source : Any
        The object originally supplied by the caller.
    """

    kind: FunctionKind
    fn: Callable[[Any], Any] = field(compare=False)
    text: str | None = None
    source: Any = field(default=None, compare=False)

    @property
    def vectorized(self) -> bool:
        """True when ``fn`` accepts a whole array of sample points."""
        return self.kind is FunctionKind.EXPRESSION

    def label(self, index: int, config: PlotConfig = DEFAULT_CONFIG) -> str:
        """Return the series label of this spec at 1-based position ``index``."""
        if self.kind is FunctionKind.EXPRESSION and self.text is not None:
            return self.text
        return config.label_for(index)

    def __call__(self, xs: Any) -> np.ndarray:
        """Evaluate the function on the sample points ``xs``.

        Callables are applied point by point; exceptions they raise propagate
        unchanged.
        """
        xs = np.asarray(xs, dtype=float)
        if self.vectorized:
            return np.broadcast_to(np.asarray(self.fn(xs)), xs.shape).copy()
        return np.asarray([self.fn(float(x)) for x in xs.ravel()]).reshape(xs.shape)


def normalize_function(f: Any) -> FunctionSpec:
    """Return ``f`` as a single :class:`FunctionSpec`.

    Raises
    ------
    TypeError
        If ``f`` is neither callable, a SymPy expression, nor a string.
    ValueError
        If an expression string is empty or an expression has unbound symbols.
    """
    if isinstance(f, FunctionSpec):
        return f
    if isinstance(f, sp.Lambda):
        if len(f.variables) != 1:
            raise ValueError(f"Expected a Lambda of a single variable, got {f}.")
        return FunctionSpec(FunctionKind.EXPRESSION, numpify(f), text=str(f.expr), source=f)
    if isinstance(f, FunctionClass):
        # sp.sin and friends: apply to the default variable.
        expr = f(DEFAULT_VARIABLE)
        return FunctionSpec(FunctionKind.EXPRESSION, numpify(expr), text=str(expr), source=f)
    if isinstance(f, Expr):
        return FunctionSpec(FunctionKind.EXPRESSION, numpify(f), text=str(f), source=f)
    if isinstance(f, str):
        text = f.strip()
        if not text:
            raise ValueError("Expression strings must not be empty.")
        try:
            expr = sp.sympify(text)
        except (sp.SympifyError, SyntaxError) as e:
            raise ValueError(f"Could not parse expression {f!r}.") from e
        return FunctionSpec(FunctionKind.EXPRESSION, numpify(expr), text=text, source=f)
    if callable(f):
        return FunctionSpec(FunctionKind.CALLABLE, f, source=f)
    raise TypeError(
        "Expected a callable, a SymPy expression, or an expression string, "
        f"got {type(f).__name__}."
    )


def normalize_functions(fs: Any) -> list[FunctionSpec]:
    """Normalize one function input or a list of them, preserving order.

    Raises
    ------
    TypeError
        If any entry is not an accepted function form.
    ValueError
        If ``fs`` is an empty list or tuple.
    """
    if isinstance(fs, Sequence) and not isinstance(fs, str):
        if len(fs) == 0:
            raise ValueError("At least one function or expression is required.")
        return [normalize_function(f) for f in fs]
    return [normalize_function(fs)]


__all__ = ["FunctionKind", "FunctionSpec", "normalize_function", "normalize_functions"]

"""Evenly spaced sampling of functions over a closed interval."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from .convert import to_real
from .normalization import normalize_function

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def sample_points(a: Any, b: Any, n: int) -> np.ndarray:
    """Return ``n + 1`` evenly spaced points from ``a`` to ``b`` inclusive.

    The step between consecutive points is ``(b - a) / n``. ``a > b`` gives a
    decreasing sequence; ``a == b`` repeats the single point.

    Parameters
    ----------
    a, b : number, SymPy number, or str
        Interval bounds. Strings such as ``"2*pi"`` are evaluated with SymPy.
    n : int
        Number of intervals. Must be positive.

    Raises
    ------
    TypeError
        If ``n`` is not an integer or a bound is not numeric.
    ValueError
        If ``n`` is not positive or a bound is not a real constant.
    """
    if isinstance(n, (bool, np.bool_)) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"n must be an int, got {type(n).__name__}")
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    lo = to_real(a, role="lower bound")
    hi = to_real(b, role="upper bound")
    return np.linspace(lo, hi, int(n) + 1)


def evaluate(f: Any, a: Any, b: Any, n: int) -> tuple[np.ndarray, np.ndarray]:
    """Sample ``f`` at ``n + 1`` points over ``[a, b]``.

    ``f`` may be a callable, a SymPy expression, an expression string, or an
    already normalized :class:`~plotpoetry.normalization.FunctionSpec`.
    Exceptions raised while evaluating ``f`` propagate unchanged.

    Returns
    -------
    tuple of numpy.ndarray
        ``(xs, ys)`` with ``ys[k] == f(xs[k])``.

    Examples
    --------
    >>> import math
    >>> xs, ys = evaluate(math.sin, 0, math.pi, 2)
    >>> [round(float(y), 12) for y in ys]
    [0.0, 1.0, 0.0]
    """
    spec = normalize_function(f)
    xs = sample_points(a, b, n)
    ys = spec(xs)
    logger.debug("sampled %s (%s) at %d points on [%s, %s]", spec.text or spec.source, spec.kind.value, xs.size, xs[0], xs[-1])
    return xs, ys


__all__ = ["evaluate", "sample_points"]

"""Coercion of user-supplied interval bounds to real floats."""

from __future__ import annotations

import numbers
from typing import Any

import numpy as np
import sympy as sp


def to_real(obj: Any, *, role: str = "bound") -> float:
    """
    Convert ``obj`` to a real ``float``.

    Accepted inputs:
    - Python and NumPy real numbers (``bool`` excluded),
    - SymPy numbers and constant expressions (e.g. ``sympy.pi / 2``),
    - strings holding a literal (``"1.5"``) or a SymPy expression (``"2*pi"``).

    Complex values are accepted only when their imaginary part is zero.

    Raises
    ------
    TypeError
        If ``obj`` is not a number, a SymPy expression or a string.
    ValueError
        If the value is not real, not finite-constant, or a string fails to parse.
    """
    if isinstance(obj, (bool, np.bool_)):
        raise TypeError(f"{role} must be a real number, got {type(obj).__name__}")

    # Fast path: native and NumPy numbers
    if isinstance(obj, numbers.Number):
        return _real_part(complex(obj), obj, role=role)

    if isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"Cannot convert empty string to a {role}.")
        try:
            return float(s)
        except ValueError:
            pass
        try:
            expr = sp.sympify(s)
        except (sp.SympifyError, SyntaxError, TypeError) as e:
            raise ValueError(f"Could not parse {role} {obj!r} as a number or SymPy expression.") from e
        return _from_sympy(expr, obj, role=role)

    if isinstance(obj, sp.Basic):
        return _from_sympy(obj, obj, role=role)

    raise TypeError(
        f"{role} must be a real number, a SymPy expression, or a string, got {type(obj).__name__}"
    )


def _from_sympy(expr: sp.Basic, original: Any, *, role: str) -> float:
    """Evaluate a constant SymPy expression to a float."""
    if expr.free_symbols:
        names = ", ".join(sorted(s.name for s in expr.free_symbols))
        raise ValueError(f"{role} {original!r} is not constant (free symbols: {names}).")
    try:
        value = complex(expr.evalf())
    except (TypeError, ValueError) as e:
        raise ValueError(f"Could not evaluate {role} {original!r} numerically.") from e
    return _real_part(value, original, role=role)


def _real_part(value: complex, original: Any, *, role: str) -> float:
    if value.imag != 0:
        raise ValueError(f"{role} {original!r} is not real: imaginary part is non-zero.")
    return float(value.real)


__all__ = ["to_real"]

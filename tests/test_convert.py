from __future__ import annotations

import math

import numpy as np
import pytest
import sympy as sp

from plotpoetry.convert import to_real


@pytest.mark.parametrize(
    "value, expected",
    [
        (1, 1.0),
        (2.5, 2.5),
        (np.float32(0.5), 0.5),
        (sp.Rational(1, 4), 0.25),
        (sp.pi, math.pi),
        ("3", 3.0),
        ("2*pi", 2 * math.pi),
        (complex(4, 0), 4.0),
    ],
)
def test_to_real_accepts_numeric_forms(value, expected) -> None:
    assert to_real(value) == pytest.approx(expected)


def test_to_real_rejects_non_real_values() -> None:
    with pytest.raises(ValueError, match="imaginary part is non-zero"):
        to_real(1 + 2j)
    with pytest.raises(ValueError, match="not constant"):
        to_real(sp.Symbol("x") + 1)
    with pytest.raises(ValueError, match="empty string"):
        to_real("  ")


def test_to_real_rejects_unsupported_types() -> None:
    with pytest.raises(TypeError, match="lower bound"):
        to_real(None, role="lower bound")
    with pytest.raises(TypeError):
        to_real(True)

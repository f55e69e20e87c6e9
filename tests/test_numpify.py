from __future__ import annotations

import numpy as np
import pytest
import sympy as sp

from plotpoetry.numpify import DEFAULT_VARIABLE, numpify, resolve_variable


def test_compiles_single_variable_expression_vectorized() -> None:
    x = sp.Symbol("x")
    f = numpify(x**2 + 2 * x + 1)

    xs = np.array([0.0, 1.0, 2.0])
    np.testing.assert_allclose(f(xs), xs**2 + 2 * xs + 1)
    assert "def _generated(x)" in (f.__doc__ or "")


def test_sole_free_symbol_becomes_the_argument() -> None:
    t = sp.Symbol("t")
    f = numpify(sp.cos(t))

    assert f(0.0) == pytest.approx(1.0)
    assert resolve_variable(sp.cos(t)) == t


def test_constant_expression_broadcasts_to_argument_shape() -> None:
    f = numpify(5)

    out = f(np.array([1.0, 2.0, 3.0]))
    assert isinstance(out, np.ndarray)
    np.testing.assert_allclose(out, [5.0, 5.0, 5.0])
    assert resolve_variable(sp.Integer(5)) == DEFAULT_VARIABLE


def test_string_expression_is_parsed() -> None:
    f = numpify("sin(x)**2 + cos(x)**2")

    np.testing.assert_allclose(f(np.linspace(0, 3, 7)), np.ones(7))


def test_extra_symbols_must_be_bound() -> None:
    x, a = sp.symbols("x a")

    with pytest.raises(ValueError, match="unbound symbols: a"):
        numpify(a * x, x)

    g = numpify(a * x, x, f_numpy={a: 2.0})
    np.testing.assert_allclose(g(np.array([1, 2, 3])), [2.0, 4.0, 6.0])


def test_binding_the_argument_symbol_is_rejected() -> None:
    x = sp.Symbol("x")

    with pytest.raises(ValueError, match="overwrite the function argument"):
        numpify(x + 1, x, f_numpy={x: 1.0})


def test_unknown_function_requires_binding() -> None:
    x = sp.Symbol("x")
    G = sp.Function("G")

    with pytest.raises(ValueError, match="require a NumPy implementation: G"):
        numpify(G(x))

    f = numpify(G(x) + 1, f_numpy={G: lambda v: 2 * v})
    np.testing.assert_allclose(f(np.array([1.0, 2.0])), [3.0, 5.0])


def test_function_class_f_numpy_attribute_is_auto_bound() -> None:
    x = sp.Symbol("x")

    class Double(sp.Function):
        f_numpy = staticmethod(lambda v: 2 * v)

    f = numpify(Double(x))
    np.testing.assert_allclose(f(np.array([1.0, 4.0])), [2.0, 8.0])


def test_non_callable_function_binding_is_rejected() -> None:
    x = sp.Symbol("x")
    G = sp.Function("G")

    with pytest.raises(TypeError, match="must be callable"):
        numpify(G(x), f_numpy={G: 3})


def test_keyword_symbol_names_are_mangled() -> None:
    lam = sp.Symbol("lambda")
    f = numpify(2 * lam)

    assert f(3.0) == pytest.approx(6.0)


def test_keyword_named_bindings_are_mangled() -> None:
    x, lam = sp.symbols("x lambda")

    f = numpify(lam * x, x, f_numpy={sp.Symbol("lambda"): 2.0})
    np.testing.assert_allclose(f(np.array([1.0, 2.0])), [2.0, 4.0])


def test_binding_names_do_not_collide_after_mangling() -> None:
    x, a_dot, a_us = sp.Symbol("x"), sp.Symbol("a.b"), sp.Symbol("a_b")

    f = numpify(a_dot - a_us + x, x, f_numpy={a_dot: 10.0, a_us: 1.0})
    np.testing.assert_allclose(f(np.array([0.0, 1.0])), [9.0, 10.0])


def test_lambda_supplies_the_argument_symbol() -> None:
    t = sp.Symbol("t")

    f = numpify(sp.Lambda(t, t**2))
    np.testing.assert_allclose(f(np.array([0.0, 0.5, 1.0])), [0.0, 0.25, 1.0])

    with pytest.raises(ValueError, match="does not match the Lambda variable"):
        numpify(sp.Lambda(t, t**2), "x")

"""
numpify: Compile one-variable SymPy expressions to NumPy callables
==================================================================

Purpose
-------
Turn a SymPy expression into a Python function of a single argument that
evaluates with NumPy broadcasting. This is how symbolic inputs to
:func:`plotpoetry.plot` become something the sampler can call.

Dependencies
------------
- NumPy (required)
- SymPy (required)

How custom functions are handled
--------------------------------
SymPy's NumPy code printer cannot print arbitrary user-defined SymPy Functions.
The printer is created with ``allow_unknown_functions`` so that ``G(x)`` prints
as a plain call, and the name ``G`` is then bound at runtime.

Bindings are resolved in this order:

1. Explicit bindings provided via the ``f_numpy`` argument.
2. Auto-detection: if a function class ``F`` appearing in the expression has a
   callable ``F.f_numpy`` attribute, that callable is used.

If an unknown function remains unbound, :func:`numpify` raises before code
generation.

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> from plotpoetry.numpify import numpify
>>> x = sp.Symbol("x")
>>> f = numpify(sp.sin(x) ** 2)
>>> f(np.array([0.0]))
array([0.])

Constants broadcast to the argument shape:
>>> numpify(5)(np.array([1, 2, 3]))
array([5., 5., 5.])

Extra symbols must be bound:
>>> a = sp.Symbol("a")
>>> numpify(a * x, x, f_numpy={a: 2.0})(np.array([1, 2, 3]))
array([2., 4., 6.])

Logging
-------
Uses the standard :mod:`logging` library and is silent by default. Enable with
``logging.getLogger("plotpoetry.numpify").setLevel(logging.DEBUG)``.
"""

from __future__ import annotations

import keyword
import logging
import textwrap
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union, cast

import numpy as np
import sympy as sp
from sympy.core.function import FunctionClass
from sympy.printing.numpy import NumPyPrinter


__all__ = ["DEFAULT_VARIABLE", "numpify", "resolve_variable"]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


DEFAULT_VARIABLE = sp.Symbol("x")

_FuncBindingKey = Union[FunctionClass, sp.Function]
_BindingKey = Union[sp.Symbol, _FuncBindingKey]
_SymBindings = Dict[str, Any]
_FuncBindings = Dict[str, Callable[..., Any]]


def numpify(
    expr: Any,
    var: Optional[Union[sp.Symbol, str]] = None,
    *,
    f_numpy: Optional[Mapping[_BindingKey, Any]] = None,
) -> Callable[[Any], Any]:
    """Compile a SymPy expression into a NumPy-evaluable function of one argument.

    Parameters
    ----------
    expr:
        A SymPy expression or anything convertible via :func:`sympy.sympify`
        (including strings such as ``"sin(x)**2"``). A one-variable
        :class:`sympy.Lambda` is compiled in its own variable.
    var:
        The symbol (or symbol name) bound to the function's argument. Defaults
        to the sole free symbol of ``expr``; when the expression is constant or
        has several free symbols, ``x`` is used.
    f_numpy:
        Optional bindings for symbols other than ``var`` (``{a: 2.0}``) and for
        SymPy function classes without a NumPy printer (``{G: callable}``).

    Returns
    -------
    Callable[[Any], Any]
        A generated function. Its ``__doc__`` holds the generated source.

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible, or a function binding is not callable.
    ValueError
        If ``expr`` has unbound symbols or unknown functions without bindings,
        or a symbol binding would shadow ``var``.

    Notes
    -----
    This function uses ``exec`` to define the generated function. Avoid calling
    it on untrusted expressions.
    """
    # 1) Normalize expr to SymPy.
    try:
        expr_sym = sp.sympify(expr)
    except (sp.SympifyError, SyntaxError, TypeError) as e:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr).__name__}") from e
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym).__name__}")
    expr = cast(sp.Basic, expr_sym)

    # 2) Pick the argument symbol; a Lambda carries its own.
    if isinstance(expr, sp.Lambda):
        if len(expr.variables) != 1:
            raise ValueError(f"numpify expects a Lambda of one variable, got {len(expr.variables)}: {expr}")
        if var is not None and resolve_variable(expr, var) != expr.variables[0]:
            raise ValueError(f"var={var!r} does not match the Lambda variable {expr.variables[0]}")
        var = expr.variables[0]
        expr = expr.expr
    var_sym = resolve_variable(expr, var)

    # 3) Parse bindings and account for every free symbol.
    sym_bindings, func_bindings = _parse_bindings(expr, f_numpy)
    if var_sym.name in sym_bindings:
        raise ValueError(f"Symbol binding for {var_sym.name!r} would overwrite the function argument.")

    missing_names = {s.name for s in expr.free_symbols} - {var_sym.name} - set(sym_bindings)
    if missing_names:
        missing_str = ", ".join(sorted(missing_names))
        raise ValueError(
            f"Expression {expr} contains unbound symbols: {missing_str}. "
            f"Only {var_sym.name} is the function argument; bind others via f_numpy={{symbol: value}}."
        )

    # 4) Printer that renders unknown functions as plain calls.
    printer = NumPyPrinter(settings={"user_functions": {}, "allow_unknown_functions": True})
    _require_bound_unknown_functions(expr, printer, func_bindings)

    # 5) Generate source; every injected name is mangled to a distinct identifier.
    renames = _identifier_map([var_sym.name, *sorted(sym_bindings)], reserved=func_bindings)
    arg_name = renames[var_sym.name]
    expr = expr.xreplace(
        {s: sp.Symbol(renames[s.name]) for s in expr.free_symbols if renames.get(s.name, s.name) != s.name}
    )
    expr_code = printer.doprint(expr)

    lines = [f"def _generated({arg_name}):", f"    {arg_name} = numpy.asarray({arg_name})"]
    for nm in sorted(sym_bindings):
        lines.append(f"    {renames[nm]} = _sym_bindings[{nm!r}]")
    if arg_name not in {s.name for s in expr.free_symbols}:
        # Constant in the argument: broadcast to the sample shape.
        lines.append(f"    return ({expr_code}) + numpy.zeros({arg_name}.shape)")
    else:
        lines.append(f"    return {expr_code}")
    src = "\n".join(lines)

    glb: Dict[str, Any] = {
        "numpy": np,
        "_sym_bindings": sym_bindings,
        **func_bindings,
    }
    loc: Dict[str, Any] = {}
    exec(src, glb, loc)
    fn = cast(Callable[[Any], Any], loc["_generated"])

    fn.__doc__ = textwrap.dedent(
        f"""
        Auto-generated NumPy function from SymPy expression.

        expr: {expr_sym!r}
        var: {var_sym.name}

        Source:
        {{src}}
        """
    ).strip().replace("{src}", src)

    logger.debug("numpify compiled %s in %s", expr_sym, var_sym.name)
    return fn


def resolve_variable(expr: sp.Basic, var: Optional[Union[sp.Symbol, str]] = None) -> sp.Symbol:
    """Return the symbol a compiled ``expr`` takes as its argument."""
    if var is None:
        free = sorted(expr.free_symbols, key=lambda s: s.name)
        return free[0] if len(free) == 1 else DEFAULT_VARIABLE
    if isinstance(var, sp.Symbol):
        return var
    if isinstance(var, str):
        return sp.Symbol(var)
    raise TypeError(f"var must be a SymPy Symbol or a name, got {type(var).__name__}")


def _safe_identifier(name: str) -> str:
    """Mangle a symbol name into a valid Python identifier."""
    cleaned = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in name)
    if not cleaned or cleaned[0].isdigit():
        cleaned = "_" + cleaned
    if keyword.iskeyword(cleaned) or cleaned in ("numpy", "_sym_bindings"):
        cleaned += "_"
    return cleaned


def _identifier_map(names: Iterable[str], *, reserved: Iterable[str] = ()) -> Dict[str, str]:
    """Map symbol names to distinct, valid Python identifiers."""
    taken = set(reserved)
    mapping: Dict[str, str] = {}
    for name in names:
        candidate = _safe_identifier(name)
        while candidate in taken:
            candidate += "_"
        taken.add(candidate)
        mapping[name] = candidate
    return mapping


def _parse_bindings(expr: sp.Basic, f_numpy: Optional[Mapping[_BindingKey, Any]]) -> Tuple[_SymBindings, _FuncBindings]:
    """Split user-provided bindings into symbol and function bindings, plus auto-bindings."""
    sym_bindings: _SymBindings = {}
    func_bindings: _FuncBindings = {}

    for key, value in (f_numpy or {}).items():
        if isinstance(key, sp.Symbol):
            sym_bindings[key.name] = value
            continue

        if isinstance(key, sp.Function):
            name = key.func.__name__
        elif isinstance(key, FunctionClass):
            name = key.__name__
        else:
            raise TypeError(
                "f_numpy keys must be SymPy Symbols or SymPy function objects/classes. "
                f"Got {type(key).__name__}."
            )
        if not callable(value):
            raise TypeError(f"Function binding for {name} must be callable, got {type(value).__name__}")
        func_bindings[name] = cast(Callable[..., Any], value)

    # Auto-bind implementations carried on the function class (F.f_numpy).
    for app in expr.atoms(sp.Function):
        impl = getattr(app.func, "f_numpy", None)
        if callable(impl) and app.func.__name__ not in func_bindings:
            func_bindings[app.func.__name__] = cast(Callable[..., Any], impl)

    return sym_bindings, func_bindings


def _require_bound_unknown_functions(
    expr: sp.Basic, printer: NumPyPrinter, func_bindings: Mapping[str, Callable[..., Any]]
) -> None:
    """Ensure any *bare* printed function calls have runtime bindings."""
    missing: set[str] = set()

    for app in expr.atoms(sp.Function):
        name = app.func.__name__
        code = printer.doprint(app).strip()
        if code.startswith(f"{name}(") and name not in func_bindings:
            missing.add(name)

    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ValueError(
            "Expression contains unknown SymPy function(s) that require a NumPy implementation: "
            f"{missing_str}. Define `<F>.f_numpy` on the function class "
            "or pass `f_numpy={F: callable}` to numpify."
        )

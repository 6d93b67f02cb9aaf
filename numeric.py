from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Sequence, Union

import numpy as np

import number as nb
from edag import EDAG
from expression import Expr, Symbol, lift

# Float evaluation of expressions on numpy scalars or arrays.
_FUNCS: Dict[str, Callable[[Any], Any]] = {
    "sin": np.sin,
    "cos": np.cos,
    "tan": np.tan,
    "asin": np.arcsin,
    "acos": np.arccos,
    "atan": np.arctan,
    "sinh": np.sinh,
    "cosh": np.cosh,
    "tanh": np.tanh,
    "exp": np.exp,
    "ln": np.log,
    "log": np.log,
    "sqrt": np.sqrt,
    "abs": np.abs,
}

_CONSTANTS = {"pi": np.pi, "e": np.e, "i": 1j}


def _to_float(value: nb.Number) -> Union[float, complex]:
    if isinstance(value, nb.Complex):
        return value.to_complex()
    return value.to_float()


def apply_function(name: str, x: float) -> Optional[float]:
    """Real value of ``name(x)``, or ``None`` outside the real domain."""
    fn = _FUNCS.get(name)
    if fn is None:
        return None
    with np.errstate(all="ignore"):
        y = fn(np.float64(x))
    if not np.isfinite(y):
        return None
    return float(y)


def evaluate(expr: Expr, env: Optional[Dict[str, Any]] = None) -> Any:
    """Evaluate ``expr`` with numpy; ``env`` values may be scalars or arrays."""
    env = env or {}
    dag = EDAG.from_expression(lift(expr))
    values: Dict[str, Any] = {}
    for nid in dag.evaluation_order():
        data = dag.node(nid)
        if data.type == "NUM":
            values[nid] = _to_float(data.value)
        elif data.type == "CONST":
            values[nid] = _CONSTANTS[data.symbol]
        elif data.type == "VAR":
            if data.symbol not in env:
                raise KeyError(f"Variable '{data.symbol}' not in env")
            v = env[data.symbol]
            values[nid] = np.asarray(v) if np.iscomplexobj(v) else np.asarray(v, dtype=float)
        elif data.type == "FUNC":
            fn = _FUNCS.get(data.op)
            if fn is None:
                raise ValueError(f"Unknown function {data.op}")
            args = [values[c] for c in data.children]
            values[nid] = fn(*args)
        else:
            args = [values[c] for c in data.children]
            if data.is_unary:
                values[nid] = -args[0]
            else:
                a, b = args
                if data.op == "+":
                    values[nid] = a + b
                elif data.op == "-":
                    values[nid] = a - b
                elif data.op == "*":
                    values[nid] = a * b
                elif data.op == "/":
                    values[nid] = np.divide(a, b)
                elif data.op == "^":
                    values[nid] = np.power(a, b)
                else:
                    raise ValueError(f"Unknown op {data.op}")
    out = values[dag.root]
    if isinstance(out, np.ndarray) and out.ndim == 0:
        return out.item()
    return out


def lambdify(expr: Expr, variables: Sequence[Union[str, Symbol]]) -> Callable[..., Any]:
    """Callable taking one positional argument per variable, in order."""
    names = [v.name if isinstance(v, Symbol) else v for v in variables]

    def f(*args: Any) -> Any:
        if len(args) != len(names):
            raise TypeError(f"expected {len(names)} argument(s), got {len(args)}")
        return evaluate(expr, dict(zip(names, args)))

    return f

"""Immutable expression trees and their canonicalizing constructors.

Node kinds: ``Num`` (numeric literal), ``Symbol``, ``Constant`` (pi, e, i),
``UnaryOp`` (negation), ``BinaryOp`` (+ - * / ^) and ``Function``.

Nodes are never mutated. Equality is structural and the structural hash is
computed once per node. The constructors ``add, sub, mul, div, power, neg``
only do local, unconditional work: fold two literals, drop an identity
operand, and sort the operands of ``+`` and ``*`` by ``sort_key``. Anything
pattern based belongs to the rule modules.
"""
from __future__ import annotations
import decimal
from dataclasses import dataclass
from fractions import Fraction
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Tuple, Union

import number as nb
from errors import CASArithmeticError, ExponentTooLarge, MalformedExpression
from number import Number, as_number

CONSTANTS = ("pi", "e", "i")
UNARY_OPS = ("-",)
BINARY_OPS = ("+", "-", "*", "/", "^")
COMMUTATIVE_OPS = ("+", "*")
# constructors fold literal powers only up to this exponent; larger ones are
# left to the engine and its configured magnitude ceiling
CONSTRUCTOR_EXPONENT_LIMIT = 64

ExprLike = Union["Expr", int, float, Fraction, decimal.Decimal, Number]


class Expr:
    """Common behaviour of all nodes: hashing, ordering, operators."""

    def _args(self) -> Tuple[Any, ...]:
        raise NotImplementedError

    def sort_key(self) -> Tuple:
        key = self.__dict__.get("_key")
        if key is None:
            key = self._sort_key()
            object.__setattr__(self, "_key", key)
        return key

    def _sort_key(self) -> Tuple:
        raise NotImplementedError

    def __hash__(self) -> int:
        h = self.__dict__.get("_hash")
        if h is None:
            h = hash((type(self).__name__,) + self._args())
            object.__setattr__(self, "_hash", h)
        return h

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        if hash(self) != hash(other):
            return False
        return self._args() == other._args()

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    # operators build through the smart constructors
    def __add__(self, other: ExprLike) -> Expr:
        return add(self, lift(other))

    def __radd__(self, other: ExprLike) -> Expr:
        return add(lift(other), self)

    def __sub__(self, other: ExprLike) -> Expr:
        return sub(self, lift(other))

    def __rsub__(self, other: ExprLike) -> Expr:
        return sub(lift(other), self)

    def __mul__(self, other: ExprLike) -> Expr:
        return mul(self, lift(other))

    def __rmul__(self, other: ExprLike) -> Expr:
        return mul(lift(other), self)

    def __truediv__(self, other: ExprLike) -> Expr:
        return div(self, lift(other))

    def __rtruediv__(self, other: ExprLike) -> Expr:
        return div(lift(other), self)

    def __pow__(self, other: ExprLike) -> Expr:
        return power(self, lift(other))

    def __rpow__(self, other: ExprLike) -> Expr:
        return power(lift(other), self)

    def __neg__(self) -> Expr:
        return neg(self)

    def __pos__(self) -> Expr:
        return self

    def __str__(self) -> str:
        return to_string(self)


@dataclass(frozen=True, eq=False)
class Num(Expr):
    value: Number

    def __post_init__(self) -> None:
        if not isinstance(self.value, Number):
            raise MalformedExpression(f"Num needs a Number, got {type(self.value).__name__}")

    def _args(self) -> Tuple[Any, ...]:
        return (self.value,)

    def _sort_key(self) -> Tuple:
        return (0, self.value.sort_key())


@dataclass(frozen=True, eq=False)
class Constant(Expr):
    name: str

    def __post_init__(self) -> None:
        if self.name not in CONSTANTS:
            raise MalformedExpression(f"unknown constant '{self.name}'")

    def _args(self) -> Tuple[Any, ...]:
        return (self.name,)

    def _sort_key(self) -> Tuple:
        return (1, self.name)


@dataclass(frozen=True, eq=False)
class Symbol(Expr):
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.isidentifier():
            raise MalformedExpression(f"bad symbol name {self.name!r}")

    def _args(self) -> Tuple[Any, ...]:
        return (self.name,)

    def _sort_key(self) -> Tuple:
        return (2, self.name)


@dataclass(frozen=True, eq=False)
class Function(Expr):
    name: str
    args: Tuple[Expr, ...]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.isidentifier():
            raise MalformedExpression(f"bad function name {self.name!r}")
        args = tuple(self.args)
        for a in args:
            if not isinstance(a, Expr):
                raise MalformedExpression(f"argument of {self.name} is not an expression: {a!r}")
        object.__setattr__(self, "args", args)

    def _args(self) -> Tuple[Any, ...]:
        return (self.name,) + self.args

    def _sort_key(self) -> Tuple:
        return (3, self.name, tuple(a.sort_key() for a in self.args))


@dataclass(frozen=True, eq=False)
class UnaryOp(Expr):
    op: str
    operand: Expr

    def __post_init__(self) -> None:
        if self.op not in UNARY_OPS:
            raise MalformedExpression(f"unknown unary operator '{self.op}'")
        if not isinstance(self.operand, Expr):
            raise MalformedExpression(f"operand is not an expression: {self.operand!r}")

    def _args(self) -> Tuple[Any, ...]:
        return (self.op, self.operand)

    def _sort_key(self) -> Tuple:
        return (4, self.op, self.operand.sort_key())


@dataclass(frozen=True, eq=False)
class BinaryOp(Expr):
    op: str
    left: Expr
    right: Expr

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPS:
            raise MalformedExpression(f"unknown binary operator '{self.op}'")
        if not isinstance(self.left, Expr) or not isinstance(self.right, Expr):
            raise MalformedExpression(f"operands of '{self.op}' must be expressions")

    def _args(self) -> Tuple[Any, ...]:
        return (self.op, self.left, self.right)

    def _sort_key(self) -> Tuple:
        return (5, self.op, self.left.sort_key(), self.right.sort_key())


# -----------------
# Lifting and inspection
# -----------------
def lift(value: ExprLike) -> Expr:
    if isinstance(value, Expr):
        return value
    try:
        return Num(as_number(value))
    except TypeError:
        raise MalformedExpression(f"cannot use {type(value).__name__} as an expression") from None


def is_zero(e: Expr) -> bool:
    return isinstance(e, Num) and e.value.is_exact() and e.value.is_zero()


def is_one(e: Expr) -> bool:
    return isinstance(e, Num) and e.value.is_exact() and e.value.is_one()


def is_op(e: Expr, op: str) -> bool:
    return isinstance(e, BinaryOp) and e.op == op


def is_neg(e: Expr) -> bool:
    return isinstance(e, UnaryOp) and e.op == "-"


def is_func(e: Expr, *names: str) -> bool:
    return isinstance(e, Function) and (not names or e.name in names)


def children(e: Expr) -> Tuple[Expr, ...]:
    if isinstance(e, BinaryOp):
        return (e.left, e.right)
    if isinstance(e, UnaryOp):
        return (e.operand,)
    if isinstance(e, Function):
        return e.args
    return ()


def rebuild(e: Expr, new_children: Iterable[Expr]) -> Expr:
    """Rebuild ``e`` from new children through the smart constructors."""
    kids = tuple(new_children)
    if isinstance(e, BinaryOp):
        return _BINARY_BUILDERS[e.op](kids[0], kids[1])
    if isinstance(e, UnaryOp):
        return neg(kids[0])
    if isinstance(e, Function):
        if kids == e.args:
            return e
        return Function(e.name, kids)
    return e


def free_symbols(e: Expr) -> FrozenSet[str]:
    if isinstance(e, Symbol):
        return frozenset((e.name,))
    out: FrozenSet[str] = frozenset()
    for c in children(e):
        out = out | free_symbols(c)
    return out


def contains(e: Expr, var: Union[str, Symbol]) -> bool:
    name = var.name if isinstance(var, Symbol) else var
    if isinstance(e, Symbol):
        return e.name == name
    return any(contains(c, name) for c in children(e))


def substitute(e: Expr, mapping: Mapping[Union[str, Symbol], ExprLike]) -> Expr:
    subs: Dict[str, Expr] = {
        (k.name if isinstance(k, Symbol) else k): lift(v) for k, v in mapping.items()
    }

    def walk(node: Expr) -> Expr:
        if isinstance(node, Symbol):
            return subs.get(node.name, node)
        kids = children(node)
        if not kids:
            return node
        return rebuild(node, [walk(c) for c in kids])

    return walk(e)


def size(e: Expr) -> int:
    return 1 + sum(size(c) for c in children(e))


# -----------------
# Smart constructors
# -----------------
def _ordered(a: Expr, b: Expr) -> Tuple[Expr, Expr]:
    return (a, b) if a.sort_key() <= b.sort_key() else (b, a)


def add(a: ExprLike, b: ExprLike) -> Expr:
    a, b = lift(a), lift(b)
    if isinstance(a, Num) and isinstance(b, Num):
        return Num(nb.add(a.value, b.value))
    if is_zero(a):
        return b
    if is_zero(b):
        return a
    return BinaryOp("+", *_ordered(a, b))


def sub(a: ExprLike, b: ExprLike) -> Expr:
    a, b = lift(a), lift(b)
    if isinstance(a, Num) and isinstance(b, Num):
        return Num(nb.sub(a.value, b.value))
    if is_zero(b):
        return a
    if is_zero(a):
        return neg(b)
    return BinaryOp("-", a, b)


def mul(a: ExprLike, b: ExprLike) -> Expr:
    a, b = lift(a), lift(b)
    if isinstance(a, Num) and isinstance(b, Num):
        return Num(nb.mul(a.value, b.value))
    if is_one(a):
        return b
    if is_one(b):
        return a
    return BinaryOp("*", *_ordered(a, b))


def div(a: ExprLike, b: ExprLike) -> Expr:
    a, b = lift(a), lift(b)
    if isinstance(a, Num) and isinstance(b, Num):
        return Num(nb.div(a.value, b.value))
    if isinstance(b, Num) and b.value.is_zero():
        raise CASArithmeticError(f"division by zero in {a}/{b}")
    if is_one(b):
        return a
    return BinaryOp("/", a, b)


def power(a: ExprLike, b: ExprLike) -> Expr:
    a, b = lift(a), lift(b)
    if isinstance(a, Num) and isinstance(b, Num):
        try:
            folded = nb.power(a.value, b.value, CONSTRUCTOR_EXPONENT_LIMIT)
        except ExponentTooLarge:
            folded = None
        if folded is not None:
            return Num(folded)
    return BinaryOp("^", a, b)


def neg(a: ExprLike) -> Expr:
    a = lift(a)
    if isinstance(a, Num):
        return Num(nb.negate(a.value))
    if is_neg(a):
        return a.operand
    return UnaryOp("-", a)


def func(name: str, *args: ExprLike) -> Expr:
    return Function(name, tuple(lift(x) for x in args))


_BINARY_BUILDERS = {"+": add, "-": sub, "*": mul, "/": div, "^": power}


def build_sum(terms: Iterable[Expr]) -> Expr:
    """Left fold of ``terms`` in sort order; negated terms become subtractions."""
    ordered = sorted(terms, key=lambda t: t.sort_key())
    if not ordered:
        return Num(nb.ZERO)
    acc = ordered[0]
    for t in ordered[1:]:
        acc = sub(acc, t.operand) if is_neg(t) else add(acc, t)
    return acc


def build_product(factors: Iterable[Expr]) -> Expr:
    ordered = sorted(factors, key=lambda t: t.sort_key())
    if not ordered:
        return Num(nb.ONE)
    acc = ordered[0]
    for f in ordered[1:]:
        acc = mul(acc, f)
    return acc


# -----------------
# Builders
# -----------------
def symbols(names: str) -> Union[Symbol, Tuple[Symbol, ...]]:
    parts = names.replace(",", " ").split()
    syms = tuple(Symbol(p) for p in parts)
    return syms[0] if len(syms) == 1 else syms


def integer(n: int) -> Num:
    return Num(nb.Integer(n))


def rational(p: int, q: int = 1) -> Num:
    return Num(nb.rational(p, q))


def sqrt(x: ExprLike) -> Expr:
    return func("sqrt", x)


def sin(x: ExprLike) -> Expr:
    return func("sin", x)


def cos(x: ExprLike) -> Expr:
    return func("cos", x)


def tan(x: ExprLike) -> Expr:
    return func("tan", x)


def asin(x: ExprLike) -> Expr:
    return func("asin", x)


def acos(x: ExprLike) -> Expr:
    return func("acos", x)


def atan(x: ExprLike) -> Expr:
    return func("atan", x)


def sinh(x: ExprLike) -> Expr:
    return func("sinh", x)


def cosh(x: ExprLike) -> Expr:
    return func("cosh", x)


def tanh(x: ExprLike) -> Expr:
    return func("tanh", x)


def exp(x: ExprLike) -> Expr:
    return func("exp", x)


def ln(x: ExprLike) -> Expr:
    return func("ln", x)


def log(x: ExprLike) -> Expr:
    return func("log", x)


def abs_(x: ExprLike) -> Expr:
    return func("abs", x)


pi = Constant("pi")
E = Constant("e")
I = Constant("i")


# -----------------
# Plain rendering (debugging and messages only)
# -----------------
_prec = {"+": 1, "-": 1, "*": 2, "/": 2, "NEG": 3, "^": 4}
_ATOM = 5


def _node_prec(e: Expr) -> int:
    if isinstance(e, Num):
        v = e.value
        if isinstance(v, nb.Complex):
            return 0
        if v.is_negative():
            return _prec["NEG"]
        if isinstance(v, nb.Rational):
            return _prec["/"]
        return _ATOM
    if isinstance(e, BinaryOp):
        return _prec[e.op]
    if isinstance(e, UnaryOp):
        return _prec["NEG"]
    return _ATOM


def _wrap(child: Expr, parent_op: str, is_right: bool = False) -> str:
    cp = _node_prec(child)
    pp = _prec[parent_op]
    need = cp < pp or (
        cp == pp
        and ((parent_op == "^" and not is_right) or (is_right and parent_op in ("-", "/")))
    )
    s = to_string(child)
    return f"({s})" if need else s


def to_string(e: Expr) -> str:
    if isinstance(e, Num):
        return str(e.value)
    if isinstance(e, (Symbol, Constant)):
        return e.name
    if isinstance(e, Function):
        return f"{e.name}({', '.join(to_string(a) for a in e.args)})"
    if isinstance(e, UnaryOp):
        return f"-{_wrap(e.operand, 'NEG')}"
    if isinstance(e, BinaryOp):
        left = _wrap(e.left, e.op)
        right = _wrap(e.right, e.op, is_right=True)
        if e.op in ("+", "-"):
            return f"{left} {e.op} {right}"
        return f"{left}{e.op}{right}"
    raise MalformedExpression(f"unknown node {e!r}")

from __future__ import annotations
import networkx as nx
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from errors import MalformedExpression
from expression import (
	BINARY_OPS,
	CONSTANTS,
	UNARY_OPS,
	BinaryOp,
	Constant,
	Expr,
	Function,
	Num,
	Symbol,
	UnaryOp,
	children,
	rebuild,
)
from number import Number


# DAG view of an expression tree on a networkx.DiGraph. Structurally equal
# subtrees share one node, edges run child -> parent so a topological sort
# yields children before their users.
@dataclass
class Node:
	type: str  # 'NUM','VAR','CONST','OP','FUNC'
	symbol: str
	value: Any = None
	op: Optional[str] = None
	is_unary: bool = False
	expr: Optional[Expr] = None
	children: List[str] = field(default_factory=list)  # ordered child node ids


def _check_node(e: Any) -> None:
	if isinstance(e, Num):
		if not isinstance(e.value, Number):
			raise MalformedExpression(f"literal holds {type(e.value).__name__}, not a Number")
	elif isinstance(e, Symbol):
		if not isinstance(e.name, str) or not e.name.isidentifier():
			raise MalformedExpression(f"bad symbol name {e.name!r}")
	elif isinstance(e, Constant):
		if e.name not in CONSTANTS:
			raise MalformedExpression(f"unknown constant '{e.name}'")
	elif isinstance(e, UnaryOp):
		if e.op not in UNARY_OPS:
			raise MalformedExpression(f"unknown unary operator '{e.op}'")
	elif isinstance(e, BinaryOp):
		if e.op not in BINARY_OPS:
			raise MalformedExpression(f"unknown binary operator '{e.op}'")
	elif isinstance(e, Function):
		if not isinstance(e.name, str) or not e.name.isidentifier():
			raise MalformedExpression(f"bad function name {e.name!r}")
	else:
		raise MalformedExpression(f"unknown expression node {e!r}")
	for c in _raw_children(e):
		if not isinstance(c, Expr):
			raise MalformedExpression(f"child of {type(e).__name__} is not an expression: {c!r}")


def _raw_children(e: Expr) -> tuple:
	if isinstance(e, BinaryOp):
		return (e.left, e.right)
	if isinstance(e, UnaryOp):
		return (e.operand,)
	if isinstance(e, Function):
		return tuple(e.args)
	return ()


def validate(expr: Any) -> None:
	"""Fail fast on trees that break the structural contract.

	Walks by object identity first, so a node that (through tampering)
	references one of its ancestors is reported instead of recursing forever.
	"""
	g = nx.DiGraph()
	seen: Dict[int, Any] = {}
	stack = [expr]
	while stack:
		e = stack.pop()
		if id(e) in seen:
			continue
		_check_node(e)
		seen[id(e)] = e
		g.add_node(id(e))
		for c in _raw_children(e):
			g.add_edge(id(c), id(e))
			stack.append(c)
	if not nx.is_directed_acyclic_graph(g):
		cycle = nx.find_cycle(g)
		raise MalformedExpression(f"expression contains a cycle through {len(cycle)} node(s)")


class EDAG:
	def __init__(self) -> None:
		self.g = nx.DiGraph()
		self.root: Optional[str] = None
		self._id = 0
		self._ids: Dict[Expr, str] = {}

	def _nid(self) -> str:
		self._id += 1
		return f"n{self._id}"

	@staticmethod
	def from_expression(expr: Expr) -> "EDAG":
		validate(expr)
		dag = EDAG()
		dag.root = dag._add(expr)
		return dag

	def _add(self, e: Expr) -> str:
		if e in self._ids:
			return self._ids[e]
		kids = [self._add(c) for c in children(e)]
		n = self._nid()
		if isinstance(e, Num):
			data = Node("NUM", str(e.value), value=e.value, expr=e)
		elif isinstance(e, Symbol):
			data = Node("VAR", e.name, expr=e)
		elif isinstance(e, Constant):
			data = Node("CONST", e.name, expr=e)
		elif isinstance(e, Function):
			data = Node("FUNC", e.name, op=e.name, expr=e, children=kids)
		else:
			data = Node("OP", e.op, op=e.op, is_unary=isinstance(e, UnaryOp), expr=e, children=kids)
		self.g.add_node(n, data=data)
		# parallel edges collapse in a DiGraph, the ordered list lives on the node
		for c in kids:
			self.g.add_edge(c, n)
		self._ids[e] = n
		return n

	def node_count(self) -> int:
		"""Number of distinct subexpressions."""
		return self.g.number_of_nodes()

	def depth(self) -> int:
		return nx.dag_longest_path_length(self.g)

	def shared(self) -> List[Expr]:
		"""Subexpressions used by more than one parent."""
		out = []
		for n in self.g.nodes:
			data: Node = self.g.nodes[n]["data"]
			users = sum(self.node(p).children.count(n) for p in self.g.successors(n))
			if users > 1:
				out.append(data.expr)
		return sorted(out, key=lambda e: e.sort_key())

	def node(self, nid: str) -> Node:
		return self.g.nodes[nid]["data"]

	def evaluation_order(self) -> List[str]:
		"""Node ids with every child before its parents."""
		return list(nx.lexicographical_topological_sort(self.g, key=lambda n: int(n[1:])))

	def to_expression(self) -> Expr:
		if self.root is None:
			raise RuntimeError("empty DAG")
		built: Dict[str, Expr] = {}
		for nid in self.evaluation_order():
			data = self.node(nid)
			if data.type in ("NUM", "VAR", "CONST"):
				built[nid] = data.expr
			else:
				built[nid] = rebuild(data.expr, [built[c] for c in data.children])
		return built[self.root]


def dag_size(expr: Expr) -> int:
	return EDAG.from_expression(expr).node_count()

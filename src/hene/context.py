"""Typed records passed between compilation stages.

Each stage returns one of these; the pipeline collects them on a `Context`
owned by a single `compile_source` call.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from hene.env import DEFAULT_MARKER
from hene.errors import Location, Reporter
from hene.js.inspect import make_member
from hene.js.nodes import ClassDecl, ClassMember, ExprNode, Method, Program, StmtNode

# Canonical dotted path (`this.data.a`) -> reference expression for that path
StateMap: TypeAlias = dict[str, ExprNode]


@dataclass(frozen=True, slots=True)
class CompileOptions:
	filename: str | None = None
	reporter: Reporter | None = None
	marker: str = DEFAULT_MARKER
	print_output: bool = False


@dataclass(slots=True)
class NodeTracker:
	"""Declared node names and every member path that refers to them."""

	refs: dict[str, list[ExprNode]] = field(default_factory=dict)
	paths: set[str] = field(default_factory=set)
	sites: dict[str, Location | None] = field(default_factory=dict)

	def record(self, name: str, parts: Sequence[str], loc: Location | None = None) -> None:
		ref = make_member(parts)
		ref.loc = loc
		self.refs.setdefault(name, []).append(ref)
		self.paths.add(".".join(parts))
		self.sites.setdefault(name, loc)

	def __contains__(self, name: object) -> bool:
		return name in self.refs


@dataclass(slots=True)
class Component:
	"""The located component class and its constructor, if any."""

	node: ClassDecl
	ctor: Method | None


@dataclass(slots=True)
class RenderSource:
	html: str
	member: ClassMember
	# Index of a legacy `this.$built()` statement in the constructor, -1 if none
	built_index: int = -1


@dataclass(slots=True)
class Analysis:
	component: Component
	state_map: StateMap
	node_tracker: NodeTracker
	render: RenderSource

	@property
	def class_node(self) -> ClassDecl:
		return self.component.node

	@property
	def ctor(self) -> Method | None:
		return self.component.ctor

	@property
	def render_html(self) -> str:
		return self.render.html

	@property
	def built_index(self) -> int:
		return self.render.built_index


@dataclass(slots=True)
class Lifecycle:
	"""Lifecycle methods guaranteed to exist after the class shell transform."""

	ctor: Method
	connected: Method
	disconnected: Method


@dataclass(slots=True)
class WatcherDescriptor:
	"""One DOM mutation to re-apply when `state_ref` changes."""

	state_ref: ExprNode
	target: str
	source: str
	attribute: str | None = None

	@property
	def kind(self) -> Literal["text", "attribute"]:
		return "text" if self.attribute is None else "attribute"


@dataclass(slots=True)
class RenderOutput:
	statements: list[StmtNode]
	node_map: dict[str, str]
	watchers: list[WatcherDescriptor]
	build: Method


@dataclass(slots=True)
class Context:
	"""Everything one compilation knows, filled in stage by stage."""

	source: str
	options: CompileOptions = field(default_factory=CompileOptions)
	program: Program | None = None
	analysis: Analysis | None = None
	lifecycle: Lifecycle | None = None
	render: RenderOutput | None = None
	output: str | None = None


__all__ = [
	"Analysis",
	"CompileOptions",
	"Component",
	"Context",
	"Lifecycle",
	"NodeTracker",
	"RenderOutput",
	"RenderSource",
	"StateMap",
	"WatcherDescriptor",
]

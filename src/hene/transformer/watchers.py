from __future__ import annotations

import copy
import logging
from dataclasses import dataclass

from hene.context import Lifecycle, RenderOutput, WatcherDescriptor
from hene.js.inspect import this_member
from hene.js.nodes import Arrow, Assign, Call, ExprNode, ExprStmt, Identifier, Literal, Member, StmtNode, emit
from hene.transformer.render import attribute_value, interpolation_value

logger = logging.getLogger(__name__)

WATCH_SLOT = "_w{}"


@dataclass(slots=True)
class WatcherGroup:
	"""All updates that depend on one reactive value."""

	state_ref: ExprNode
	updates: list[WatcherDescriptor]


def group_watchers(descriptors: list[WatcherDescriptor]) -> list[WatcherGroup]:
	"""Group by the printed state reference, keeping first-seen order."""
	groups: dict[str, WatcherGroup] = {}
	for descriptor in descriptors:
		key = emit(descriptor.state_ref)
		group = groups.get(key)
		if group is None:
			group = groups[key] = WatcherGroup(descriptor.state_ref, [])
		group.updates.append(descriptor)
	return list(groups.values())


def update_expression(descriptor: WatcherDescriptor) -> ExprNode:
	target = Identifier(descriptor.target)
	if descriptor.attribute is None:
		source = descriptor.source
		if source.startswith("${") and source.endswith("}"):
			source = source[2:-1]
		return Assign(Member(target, "textContent"), interpolation_value(source))
	return Call(
		Member(target, "setAttribute"),
		[Literal(descriptor.attribute), attribute_value(descriptor.source)],
	)


def build_watchers(descriptors: list[WatcherDescriptor]) -> tuple[list[StmtNode], list[str]]:
	"""One `.watch(...)` subscription per group, and the slot names holding them."""
	statements: list[StmtNode] = []
	slots: list[str] = []
	for index, group in enumerate(group_watchers(descriptors)):
		slot = WATCH_SLOT.format(index)
		updates = [update_expression(d) for d in group.updates]
		body: ExprNode | list[StmtNode]
		if len(updates) == 1:
			body = updates[0]
		else:
			body = [ExprStmt(u) for u in updates]
		watch = Call(
			Member(copy.deepcopy(group.state_ref), "watch"),
			[Arrow([], body), Literal(False)],
		)
		statements.append(ExprStmt(Assign(this_member(slot), watch)))
		slots.append(slot)
	return statements, slots


def transform_watchers(render: RenderOutput, lifecycle: Lifecycle) -> list[str]:
	"""Subscribe at the end of `__build`, unsubscribe on disconnect.

	Unsubscribe calls run in reverse subscription order, ahead of whatever
	`disconnectedCallback` already does.
	"""
	statements, slots = build_watchers(render.watchers)
	render.build.body.extend(statements)
	for slot in slots:
		lifecycle.disconnected.body.insert(0, ExprStmt(Call(this_member(slot), [])))
	if slots:
		logger.debug("Emitted %d watcher(s)", len(slots))
	return slots


__all__ = [
	"WatcherGroup",
	"build_watchers",
	"group_watchers",
	"transform_watchers",
	"update_expression",
]

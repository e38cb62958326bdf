"""Python model of the reactive contract the generated code relies on.

The compiled components import `$state` from `state.js`; this module mirrors
its semantics so the batching and unsubscription rules can be tested without a
browser.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[Any], None]
Schedule = Callable[[Callable[[], None]], None]
Unsubscribe = Callable[[], None]

_SCALARS = (bool, int, float, complex, str, bytes, type(None))


def _identical(a: Any, b: Any) -> bool:
	"""Strict equality: identity, or equal scalar values of the same type."""
	if a is b:
		return True
	return type(a) is type(b) and isinstance(a, _SCALARS) and a == b


@dataclass(slots=True)
class WatchEntry:
	callback: Callback
	immediate: bool = False
	active: bool = True


def loop_schedule(flush: Callable[[], None]) -> None:
	"""Run `flush` on the running event loop, if any.

	Without a running loop the queue stays pending until someone calls
	`Scheduler.flush()` explicitly.
	"""
	try:
		loop = asyncio.get_running_loop()
	except RuntimeError:
		return
	loop.call_soon(flush)


class Scheduler:
	"""Batches non-immediate notifications into a single deferred flush.

	Ordering across states is enqueue order. An entry deactivated before its
	turn is skipped.
	"""

	schedule: Schedule
	queue: list[tuple[WatchEntry, Any]]
	scheduled: bool

	def __init__(self, schedule: Schedule | None = None) -> None:
		self.schedule = schedule or loop_schedule
		self.queue = []
		self.scheduled = False

	def enqueue(self, entry: WatchEntry, value: Any) -> None:
		self.queue.append((entry, value))
		if self.scheduled:
			return
		self.scheduled = True
		self.schedule(self.flush)

	def flush(self) -> int:
		"""Deliver every pending notification; returns how many ran."""
		self.scheduled = False
		pending, self.queue = self.queue, []
		ran = 0
		for entry, value in pending:
			if not entry.active:
				continue
			entry.callback(value)
			ran += 1
		if ran:
			logger.debug("Flushed %d notification(s)", ran)
		return ran

	@property
	def pending(self) -> int:
		return len(self.queue)


_default: Scheduler | None = None


def default_scheduler() -> Scheduler:
	"""Process-wide scheduler shared by states created without one."""
	global _default
	if _default is None:
		_default = Scheduler()
	return _default


class State(Generic[T]):
	"""A reactive value. `state()` reads, `state(value)` writes."""

	__slots__ = ("_entries", "_scheduler", "_value")

	_value: T
	_entries: list[WatchEntry]
	_scheduler: Scheduler

	def __init__(self, initial: T, scheduler: Scheduler | None = None) -> None:
		self._value = initial
		self._entries = []
		self._scheduler = scheduler or default_scheduler()

	def get(self) -> T:
		return self._value

	def set(self, value: T) -> None:
		if _identical(value, self._value):
			return
		self._value = value
		for entry in list(self._entries):
			if not entry.active:
				continue
			if entry.immediate:
				entry.callback(value)
			else:
				self._scheduler.enqueue(entry, value)

	def __call__(self, *args: T) -> T:
		if len(args) > 1:
			raise TypeError(f"State() takes at most 1 argument ({len(args)} given)")
		if args:
			self.set(args[0])
		return self._value

	def watch(self, callback: Callback, immediate: bool = False) -> Unsubscribe:
		if not callable(callback):
			raise TypeError("Expected a function for watch callback")
		entry = WatchEntry(callback, immediate)
		self._entries.append(entry)

		def unsubscribe() -> None:
			if not entry.active:
				return
			entry.active = False
			self._entries.remove(entry)

		return unsubscribe

	@property
	def watchers(self) -> int:
		return len(self._entries)

	def __repr__(self) -> str:
		return f"State({self._value!r})"


def state(initial: Any = None, scheduler: Scheduler | None = None) -> State[Any]:
	"""Python spelling of the `$state(initial)` factory."""
	return State(initial, scheduler)


__all__ = [
	"Scheduler",
	"State",
	"WatchEntry",
	"default_scheduler",
	"loop_schedule",
	"state",
]

import asyncio
from collections.abc import Callable

import pytest
from hene.runtime import Scheduler, State, default_scheduler, state


class ManualScheduler(Scheduler):
	"""Records flush requests instead of running them."""

	requests: list[Callable[[], None]]

	def __init__(self) -> None:
		self.requests = []
		super().__init__(self.requests.append)


@pytest.fixture
def scheduler() -> ManualScheduler:
	return ManualScheduler()


def test_read_write(scheduler: ManualScheduler):
	count = state(1, scheduler)
	assert count() == 1
	assert count(2) == 2
	assert count.get() == 2
	count.set(3)
	assert count() == 3
	assert repr(count) == "State(3)"


def test_too_many_arguments(scheduler: ManualScheduler):
	with pytest.raises(TypeError):
		state(0, scheduler)(1, 2)  # type: ignore[call-arg]


def test_watch_requires_callable(scheduler: ManualScheduler):
	with pytest.raises(TypeError, match="Expected a function"):
		state(0, scheduler).watch(42)  # type: ignore[arg-type]


def test_writes_are_batched_into_one_flush(scheduler: ManualScheduler):
	seen: list[int] = []
	count = state(0, scheduler)
	count.watch(seen.append)
	count(1)
	count(2)
	count(3)
	assert seen == []
	assert len(scheduler.requests) == 1
	assert scheduler.pending == 3
	assert scheduler.flush() == 3
	assert seen == [1, 2, 3]
	assert scheduler.pending == 0


def test_identical_write_notifies_nobody(scheduler: ManualScheduler):
	seen: list[object] = []
	items = [1]
	value = state(items, scheduler)
	value.watch(seen.append, immediate=True)
	value(items)
	value(0)
	value(0)
	value(False)
	assert seen == [0, False]


def test_equal_but_distinct_objects_notify(scheduler: ManualScheduler):
	seen: list[object] = []
	value = state([1], scheduler)
	value.watch(seen.append, immediate=True)
	value([1])
	assert seen == [[1]]


def test_immediate_watchers_run_synchronously(scheduler: ManualScheduler):
	order: list[str] = []
	count = state(0, scheduler)
	count.watch(lambda v: order.append(f"deferred {v}"))
	count.watch(lambda v: order.append(f"now {v}"), immediate=True)
	count(5)
	assert order == ["now 5"]
	scheduler.flush()
	assert order == ["now 5", "deferred 5"]


def test_flush_order_follows_enqueue_order_across_states(scheduler: ManualScheduler):
	order: list[str] = []
	a = state(0, scheduler)
	b = state(0, scheduler)
	a.watch(lambda v: order.append(f"a{v}"))
	b.watch(lambda v: order.append(f"b{v}"))
	b(1)
	a(1)
	b(2)
	scheduler.flush()
	assert order == ["b1", "a1", "b2"]


def test_unsubscribe_skips_already_queued_notifications(scheduler: ManualScheduler):
	seen: list[int] = []
	count = state(0, scheduler)
	stop = count.watch(seen.append)
	count(1)
	stop()
	assert count.watchers == 0
	assert scheduler.flush() == 0
	assert seen == []


def test_unsubscribe_is_idempotent(scheduler: ManualScheduler):
	count = state(0, scheduler)
	stop = count.watch(lambda _: None)
	keep = count.watch(lambda _: None)
	stop()
	stop()
	assert count.watchers == 1
	keep()
	assert count.watchers == 0


def test_unsubscribe_during_flush(scheduler: ManualScheduler):
	seen: list[str] = []
	count = state(0, scheduler)
	stops: list[Callable[[], None]] = []

	def first(value: int) -> None:
		seen.append(f"first {value}")
		stops[1]()

	stops.append(count.watch(first))
	stops.append(count.watch(lambda v: seen.append(f"second {v}")))
	count(1)
	scheduler.flush()
	assert seen == ["first 1"]


def test_write_during_flush_schedules_next_batch(scheduler: ManualScheduler):
	seen: list[int] = []
	count = state(0, scheduler)

	def bump(value: int) -> None:
		seen.append(value)
		if value < 2:
			count(value + 1)

	count.watch(bump)
	count(1)
	scheduler.flush()
	assert seen == [1]
	assert len(scheduler.requests) == 2
	scheduler.flush()
	assert seen == [1, 2]


def test_flush_runs_on_the_event_loop():
	seen: list[int] = []

	async def main() -> None:
		count = State(0, Scheduler())
		count.watch(seen.append)
		count(1)
		count(2)
		assert seen == []
		await asyncio.sleep(0)
		assert seen == [1, 2]

	asyncio.run(main())


def test_without_a_loop_notifications_wait_for_flush():
	seen: list[int] = []
	scheduler = Scheduler()
	count = State(0, scheduler)
	count.watch(seen.append)
	count(1)
	assert scheduler.pending == 1
	assert seen == []
	scheduler.flush()
	assert seen == [1]


def test_default_scheduler_is_shared():
	assert default_scheduler() is default_scheduler()
	assert state()() is None

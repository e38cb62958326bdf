"""Reactive runtime: Python model of the shipped `state.js`."""

from hene.runtime.state import Scheduler as Scheduler
from hene.runtime.state import State as State
from hene.runtime.state import WatchEntry as WatchEntry
from hene.runtime.state import default_scheduler as default_scheduler
from hene.runtime.state import loop_schedule as loop_schedule
from hene.runtime.state import state as state

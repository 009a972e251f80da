#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Simulation controller.

The :class:`~boolsim.Simulator` owns the live state of a network and runs it
iteration by iteration. Iterations are driven cooperatively: every
:meth:`Simulator.tick` performs one synchronous update, notifies the
observers and asks the scheduler to call ``tick`` again after the configured
delay. The scheduler decides what "later" means:

    - :class:`BlockingScheduler` sleeps and runs the next callback in a loop,
      so :meth:`Simulator.start` returns once the simulation stops.
    - :class:`ManualScheduler` only queues callbacks; a test or a GUI event
      loop calls :meth:`ManualScheduler.run_next` whenever it sees fit.

Renderers subscribe as :class:`SimulationObserver` objects and interact with
the network through ``toggle_node``, ``get_rule`` and ``set_rule``.
"""

import logging
import time
import warnings
from collections import deque
from enum import Enum

import numpy as np

from typing import Callable, Optional

try:
    import boolsim.utils as utils
    from boolsim.attractors import search_attractors, AttractorSearchResult
    from boolsim.config import SimulationConfig, InitialValue
    from boolsim.exceptions import RemoteServiceError, StateMismatchError
    from boolsim.remote import RemoteService
except ModuleNotFoundError:
    import utils
    from attractors import search_attractors, AttractorSearchResult
    from config import SimulationConfig, InitialValue
    from exceptions import RemoteServiceError, StateMismatchError
    from remote import RemoteService


__all__ = [
    "SimulationStatus",
    "BlockingScheduler",
    "ManualScheduler",
    "SimulationObserver",
    "TimeSeriesRecorder",
    "Simulator",
]

logger = logging.getLogger(__name__)


class SimulationStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"


class BlockingScheduler(object):
    """
    Runs scheduled callbacks in the calling thread.

    The first call to schedule drains the queue: it sleeps for the delay of
    each callback and runs it. Callbacks scheduled while draining are
    appended to the queue instead of being run recursively.
    """

    def __init__(self, sleep : Callable[[float], None] = time.sleep):
        self.sleep = sleep
        self._queue = deque()
        self._draining = False

    def schedule(self, delay : float, callback : Callable[[], None]) -> None:
        self._queue.append((delay, callback))
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                delay, callback = self._queue.popleft()
                if delay > 0:
                    self.sleep(delay)
                callback()
        finally:
            self._queue.clear()
            self._draining = False


class ManualScheduler(object):
    """Queues callbacks until run_next or run_all is called."""

    def __init__(self):
        self.pending = deque()

    def __len__(self):
        return len(self.pending)

    def schedule(self, delay : float, callback : Callable[[], None]) -> None:
        self.pending.append((delay, callback))

    def run_next(self) -> bool:
        """Run the oldest pending callback. Returns False if none was pending."""
        if not self.pending:
            return False
        _, callback = self.pending.popleft()
        callback()
        return True

    def run_all(self, max_callbacks : Optional[int] = None) -> int:
        """
        Run pending callbacks, including those scheduled meanwhile, until the
        queue is empty or max_callbacks have run. Returns the number run.
        """
        count = 0
        while max_callbacks is None or count < max_callbacks:
            if not self.run_next():
                break
            count += 1
        return count


class SimulationObserver(object):
    """
    Base class of simulator observers. All hooks do nothing by default.
    """

    def on_started(self, simulator : "Simulator") -> None:
        pass

    def on_step(self, iteration : int, changed : list, state : dict) -> None:
        """Called after every iteration with the ids of the changed nodes."""

    def on_stopped(self, simulator : "Simulator") -> None:
        pass

    def on_state_changed(self, changed : list, state : dict) -> None:
        """Called when the state is edited outside of an iteration."""

    def on_search_complete(self, graph, attractors : list) -> None:
        pass


class TimeSeriesRecorder(SimulationObserver):
    """
    Records the state of every iteration for time series plots.

    **Constructor Parameters:**

        - variables (list[str]): Node order of the recorded columns.
        - max_columns (int | None, optional): Keep only the most recent
          max_columns iterations. None keeps all.
    """

    def __init__(self, variables : list, max_columns : Optional[int] = None):
        self.variables = list(variables)
        self.iterations = deque(maxlen=max_columns)
        self.rows = deque(maxlen=max_columns)

    def __len__(self):
        return len(self.rows)

    def record(self, iteration : int, state : dict) -> None:
        self.iterations.append(iteration)
        self.rows.append([int(state[var]) for var in self.variables])

    def on_started(self, simulator):
        if not self.rows or self.iterations[-1] != simulator.iteration:
            self.record(simulator.iteration, simulator.state)

    def on_step(self, iteration, changed, state):
        self.record(iteration, state)

    def get_time_series(self) -> tuple:
        """
        **Returns:**

            - tuple[np.array[int], np.array[int]]: The recorded iteration
              numbers and a (len(iterations), len(variables)) 0/1 matrix.
        """
        matrix = np.array(self.rows, dtype=int).reshape(len(self.rows), len(self.variables))
        return np.array(self.iterations, dtype=int), matrix


class Simulator(object):
    """
    Runs a Boolean network and publishes its state to observers.

    **Constructor Parameters:**

        - network (BooleanNetwork): The simulated network.

        - config (SimulationConfig, optional): Settings; defaults to
          SimulationConfig().

        - scheduler (optional): Object with a ``schedule(delay, callback)``
          method; defaults to a BlockingScheduler.

        - remote (RemoteService, optional): Remote seeding/stepping service.
          Built from config.server_url if omitted and config.guess_seed or
          config.use_remote is set.

        - initial_state (dict[str:bool], optional): Initial state; if
          omitted it is derived from config (remote seed or initial_value).

        - rng (None, optional): Argument for the random number generator,
          implemented in 'utils._coerce_rng'.

    **Members:**

        - state (dict[str:bool]): The live state.
        - status (SimulationStatus): IDLE or RUNNING.
        - iteration (int): Number of iterations performed since the last
          reset.
        - observers (list[SimulationObserver]): Registered observers.

    **Raises:**

        - ValueError: if config.validate() reports problems.

    **Example:**

        >>> bn = BooleanNetwork({'A': 'B', 'B': 'true'})
        >>> sim = Simulator(bn, SimulationConfig(sim_delay=0), initial_state={'A': False, 'B': False})
        >>> sim.start()
        >>> sim.state, sim.iteration
        ({'A': True, 'B': True}, 3)
    """

    def __init__(self, network, config : Optional[SimulationConfig] = None, *,
                 scheduler=None, remote : Optional[RemoteService] = None,
                 initial_state : Optional[dict] = None, rng=None):
        self.network = network
        self.config = config if config is not None else SimulationConfig()
        issues = self.config.validate(require_server_url=remote is None)
        if issues:
            raise ValueError("invalid simulation config: " + "; ".join(issues))
        self.scheduler = scheduler if scheduler is not None else BlockingScheduler()
        if remote is None and (self.config.guess_seed or self.config.use_remote):
            remote = RemoteService(self.config.server_url, timeout=self.config.timeout)
        self.remote = remote
        self.status = SimulationStatus.IDLE
        self.iteration = 0
        self.observers = []
        self._rng = utils._coerce_rng(rng)
        self._tick_pending = False
        self._max_iterations = None

        logger.info("Initializing simulator ...")
        if initial_state is None:
            self.state = self._get_initial_state()
        else:
            self.state = dict(initial_state)
            network.check_state(self.state)

    def _get_initial_state(self) -> dict:
        if self.config.guess_seed:
            seed = self.remote.initial_seed()
            unknown = [node for node in seed if node not in self.network]
            if unknown:
                warnings.warn(f"initial seed holds values for unknown nodes {unknown}, ignoring them", UserWarning)
            missing = [var for var in self.network.variables if var not in seed]
            if missing:
                raise StateMismatchError(f"initial seed lacks values for nodes {missing}")
            return {var: seed[var] for var in self.network.variables}
        if self.config.initial_value == InitialValue.RANDOM:
            return self.network.get_random_state(rng=self._rng)
        value = self.config.initial_value == InitialValue.TRUE
        return {var: value for var in self.network.variables}

    @property
    def running(self) -> bool:
        return self.status == SimulationStatus.RUNNING

    def add_observer(self, observer : SimulationObserver) -> None:
        self.observers.append(observer)

    def remove_observer(self, observer : SimulationObserver) -> None:
        self.observers.remove(observer)

    def _notify(self, hook : str, *args) -> None:
        for observer in list(self.observers):
            getattr(observer, hook)(*args)

    def start(self, max_iterations : Optional[int] = None) -> None:
        """
        Switch to RUNNING and schedule the first iteration.

        **Parameters:**

            - max_iterations (int | None, optional): Stop automatically once
              the iteration counter reaches this value. None runs until a
              fixed point is reached or stop is called.

        Does nothing if the simulator is already running.
        """
        if self.running:
            return
        assert max_iterations is None or max_iterations >= 0, "max_iterations must be non-negative"
        self._max_iterations = max_iterations
        self.status = SimulationStatus.RUNNING
        logger.info("Simulation started at iteration %d", self.iteration)
        self._notify('on_started', self)
        if not self._tick_pending:
            self._schedule_tick(0)

    def stop(self) -> None:
        """Switch to IDLE; scheduled iterations will not run. No-op when idle."""
        if not self.running:
            return
        self.status = SimulationStatus.IDLE
        logger.info("Simulation stopped at iteration %d", self.iteration)
        self._notify('on_stopped', self)

    def tick(self) -> None:
        """
        Perform one iteration if running, then schedule the next one.

        Stops automatically when the network reached a fixed point or the
        iteration limit passed to start.
        """
        self._tick_pending = False
        if not self.running:
            return
        if self._max_iterations is not None and self.iteration >= self._max_iterations:
            self.stop()
            return
        try:
            changed = self.network.step(self.state)
            self.iteration += 1
            logger.debug("iteration %d: %d nodes changed", self.iteration, len(changed))
            self._notify('on_step', self.iteration, changed, self.state)
        except BaseException:
            self.stop()
            raise
        if not changed:
            logger.info("Boolean network reached steady state.")
            self.stop()
        elif self.running and not self._tick_pending:
            self._schedule_tick(self.config.sim_delay)

    def _schedule_tick(self, delay : float) -> None:
        # a blocking scheduler runs the whole simulation inside this call
        self._tick_pending = True
        try:
            self.scheduler.schedule(delay, self.tick)
        except BaseException:
            self._tick_pending = False
            self.stop()
            raise

    def reset(self, state : Optional[dict] = None) -> None:
        """Stop, reset the iteration counter and install a new state."""
        self.stop()
        self.iteration = 0
        if state is None:
            state = self._get_initial_state()
        else:
            state = dict(state)
            self.network.check_state(state)
        self.state = state
        self._notify('on_state_changed', list(self.network.variables), self.state)

    def toggle_node(self, node : str) -> None:
        """
        Flip the value of a node. With config.one_click set, an idle
        simulator is started after sim_delay.
        """
        if node not in self.state:
            raise StateMismatchError(f"node {node!r} has no dynamics")
        self.state[node] = not self.state[node]
        self._notify('on_state_changed', [node], self.state)
        if self.config.one_click and not self.running:
            self.scheduler.schedule(self.config.sim_delay, self.start)

    def get_rule(self, node : str) -> str:
        return self.network.get_rule(node)

    def set_rule(self, node : str, text : str):
        return self.network.set_rule(node, text)

    def load_state(self, key : str) -> None:
        """Install the state encoded by a transition graph key."""
        state = self.network.codec.decode(key)
        self.state = state
        self._notify('on_state_changed', list(self.network.variables), self.state)

    def describe_state(self, key : str) -> str:
        """One 'node: value' line per node of the state encoded by key."""
        return '\n'.join(f'{node}: {value}' for node, value in self.network.codec.decode(key).items())

    def search(self, sample_count : Optional[int] = None,
               initial_states : Optional[list] = None) -> AttractorSearchResult:
        """
        Run an attractor search on private copies of the states; the live
        state is not touched.

        If config.use_remote is set, successor states come from the remote
        stepping service.

        **Raises:**

            - RemoteServiceError: if delegation is requested but fails.
        """
        remote = None
        if self.config.use_remote:
            if self.remote is None:
                raise RemoteServiceError("remote stepping requested but no remote service is configured")
            remote = self.remote
        if sample_count is None:
            sample_count = self.config.sample_count
        result = search_attractors(self.network, sample_count, initial_states=initial_states,
                                   remote=remote, rng=self._rng)
        self._notify('on_search_complete', result.graph, result.attractors)
        return result

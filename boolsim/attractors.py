#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sampling-based attractor search for synchronous Boolean networks.

Random initial states are driven through the synchronous update until a
state is reached that is already part of the state transition graph. A
repeat inside the current trajectory closes a cycle, which is reported as an
attractor. A trajectory that runs into a state discovered by an earlier
trajectory simply ends there; such convergences are not reported again.
"""

import logging

import numpy as np
import networkx as nx

from typing import NamedTuple, Optional

try:
    import boolsim.utils as utils
    from boolsim.exceptions import RemoteServiceError, StateEncodingError
except ModuleNotFoundError:
    import utils
    from exceptions import RemoteServiceError, StateEncodingError


__all__ = [
    "AttractorSearchResult",
    "search_attractors",
]

logger = logging.getLogger(__name__)


class AttractorSearchResult(NamedTuple):
    """
    Outcome of :func:`search_attractors`.

    **Members:**

        - graph (nx.DiGraph): State transition graph. Nodes are state keys
          with a 'state' attribute (the decoded state) and, for members of
          an attractor, an 'attractor' attribute (index into attractors).
          ``graph.graph['initial_states']`` lists the keys of the sampled
          initial states.

        - attractors (list[list[str]]): Attractors in order of discovery,
          each a list of state keys in the order they are traversed. Fixed
          points are lists of length one.
    """
    graph: nx.DiGraph
    attractors: list


def _remote_successors(remote, initial_states : list, codec) -> list:
    """
    Ask the remote stepping service for the trajectories of all initial
    states in a single round trip. Trajectory i must start with initial
    state i.
    """
    trajectories = remote.attractor_search(initial_states)
    if len(trajectories) != len(initial_states):
        raise RemoteServiceError(f"remote service returned {len(trajectories)} trajectories "
                                 f"for {len(initial_states)} initial states")
    for i, state in enumerate(initial_states):
        first = codec.encode(_remote_state(trajectories[i], 0, codec, i))
        if first != codec.encode(state):
            raise RemoteServiceError(f"remote trajectory {i} starts at {first}, "
                                     f"expected initial state {codec.encode(state)}")
    return trajectories


def search_attractors(network, sample_count : int = 30, *,
    initial_states : Optional[list] = None, remote=None,
    rng=None) -> AttractorSearchResult:
    """
    Build a sample of the synchronous state transition graph and detect the
    attractors reached from sample_count initial states.

    For each initial state the trajectory is followed step by step. A state
    key that is new to the graph becomes a graph node (with an edge from its
    predecessor) and the trajectory continues. A key already in the graph
    ends the trajectory after adding the closing edge; if the key occurs in
    the current trajectory, the trajectory segment from its first
    occurrence onwards is an attractor.

    **Parameters:**

        - network (BooleanNetwork): Network providing variables, codec and
          the synchronous update step.

        - sample_count (int, optional): Number of random initial states
          (default 30). Ignored if initial_states is given.

        - initial_states (list[dict[str:bool]], optional): Initial states to
          use instead of random ones. They are copied, never modified.

        - remote (RemoteService, optional): If given, successor states are
          taken from the remote stepping service (one request for the whole
          sample set) instead of from network.step. There is no fallback to
          local stepping.

        - rng (None, optional): Argument for the random number generator,
          implemented in 'utils._coerce_rng'.

    **Returns:**

        - AttractorSearchResult: (graph, attractors).

    **Raises:**

        - RemoteServiceError: if the remote trajectories are missing,
          too short, do not start with their initial state or do not match
          the network.
        - StateEncodingError: if an initial state does not hold exactly the
          dynamic nodes of the network.

    **Example:**

        >>> bn = BooleanNetwork({'A': 'true'})
        >>> graph, attractors = search_attractors(bn, 5)
        >>> attractors
        [['1']]
    """
    codec = network.codec
    if initial_states is None:
        assert isinstance(sample_count, (int, np.integer)) and sample_count > 0, "sample_count must be a positive integer"
        rng = utils._coerce_rng(rng)
        initial_states = [network.get_random_state(rng=rng) for _ in range(sample_count)]
    else:
        initial_states = [dict(state) for state in initial_states]

    trajectories = None
    if remote is not None:
        trajectories = _remote_successors(remote, initial_states, codec)

    graph = nx.DiGraph()
    graph.graph['initial_states'] = []
    attractors = []

    for i, state in enumerate(initial_states):
        trajectory = []
        position = {}
        prev = None
        j = 0
        graph.graph['initial_states'].append(codec.encode(state))
        while True:
            key = codec.encode(state)
            if key in graph:
                if key in position:
                    attractors.append(trajectory[position[key]:])
                if prev is not None:
                    graph.add_edge(prev, key)
                break
            graph.add_node(key, state=codec.decode(key))
            if prev is not None:
                graph.add_edge(prev, key)
            position[key] = len(trajectory)
            trajectory.append(key)
            if trajectories is None:
                network.step(state)
            else:
                state = _remote_state(trajectories[i], j + 1, codec, i)
            prev = key
            j += 1

    for index, attractor in enumerate(attractors):
        for key in attractor:
            graph.nodes[key]['attractor'] = index

    logger.info("attractor search: %d initial states, %d states visited, %d attractors found",
                len(initial_states), graph.number_of_nodes(), len(attractors))
    return AttractorSearchResult(graph, attractors)


def _remote_state(trajectory : list, index : int, codec, sample : int) -> dict:
    """State number index of a remote trajectory, validated against codec."""
    try:
        state = trajectory[index]
    except (IndexError, TypeError):
        raise RemoteServiceError(f"remote trajectory {sample} ends before step {index}") from None
    try:
        codec.encode(state)
    except (StateEncodingError, AttributeError, TypeError) as e:
        raise RemoteServiceError(f"remote trajectory {sample} holds an invalid state at step {index}: {e}") from e
    return dict(state)

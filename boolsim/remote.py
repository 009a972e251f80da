#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Client for the remote seeding and stepping service.

Networks imported from SBML are simulated on a server. The service offers
two endpoints:

    - ``GET  /Simulate/InitialSeed``: a suggested initial value per node,
      as a JSON object ``{node: 0|1}``.
    - ``POST /Simulate/AttractorSearch``: form field ``states`` holding a JSON
      array of initial states ``[{node: 0|1}, ...]``. The answer is a JSON
      array with one trajectory per initial state; each trajectory is an
      array of full states, starting with the initial state itself.

States are exchanged as 0/1 and converted to bool on arrival.
"""

import json
import logging

import requests

try:
    from boolsim.exceptions import RemoteServiceError
except ModuleNotFoundError:
    from exceptions import RemoteServiceError


__all__ = [
    "RemoteService",
    "export_states_json",
]

logger = logging.getLogger(__name__)

SEED_PATH = '/Simulate/InitialSeed'
ATTRACTOR_SEARCH_PATH = '/Simulate/AttractorSearch'


def export_states_json(states : list) -> str:
    """Serialize states as a JSON array of {node: 0|1} objects."""
    return json.dumps([{node: 1 if value else 0 for node, value in state.items()} for state in states])


def _import_state(entry) -> dict:
    if not isinstance(entry, dict):
        raise RemoteServiceError(f"expected a JSON object for a state, got {type(entry).__name__}")
    state = {}
    for node, value in entry.items():
        if value in (0, 1) and not isinstance(value, str):
            state[node] = bool(value)
        else:
            raise RemoteServiceError(f"invalid value {value!r} for node {node!r}")
    return state


class RemoteService(object):
    """
    Blocking HTTP client of the seeding/stepping service.

    **Constructor Parameters:**

        - server_url (str): Base URL of the service, e.g.
          ``'http://localhost:8080'``.

        - timeout (float, optional): Socket timeout in seconds per request.
          Defaults to 30.

    Every failure (unreachable server, HTTP error status, body that is not
    JSON or not shaped as documented) raises RemoteServiceError.
    """

    def __init__(self, server_url : str, timeout : float = 30.0):
        assert server_url, "server_url must be a non-empty URL"
        self.server_url = server_url.rstrip('/')
        self.timeout = timeout

    def __repr__(self):
        return f"{self.__class__.__name__}({self.server_url!r})"

    def _request(self, path : str, data : dict = None):
        url = self.server_url + path
        try:
            if data is None:
                logger.debug("GET %s", url)
                r = requests.get(url, timeout=self.timeout)
            else:
                logger.debug("POST %s", url)
                r = requests.post(url, data=data, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise RemoteServiceError(f"request to {url} failed: {e}") from e
        try:
            return r.json()
        except ValueError as e:
            raise RemoteServiceError(f"response of {url} is not valid JSON") from e

    def initial_seed(self) -> dict:
        """
        Fetch the suggested initial value of every node.

        **Returns:**

            - dict[str:bool]: Suggested initial state.
        """
        return _import_state(self._request(SEED_PATH))

    def attractor_search(self, states : list) -> list:
        """
        Simulate all initial states remotely in a single request.

        **Parameters:**

            - states (list[dict[str:bool]]): Initial states.

        **Returns:**

            - list[list[dict[str:bool]]]: One trajectory per initial state.
              Element 0 of each trajectory is the initial state, element j+1
              the state after j+1 synchronous steps.
        """
        response = self._request(ATTRACTOR_SEARCH_PATH, {'states': export_states_json(states)})
        if not isinstance(response, list):
            raise RemoteServiceError("attractor search response must be a JSON array")
        trajectories = []
        for trajectory in response:
            if not isinstance(trajectory, list):
                raise RemoteServiceError("each trajectory must be a JSON array of states")
            trajectories.append([_import_state(entry) for entry in trajectory])
        return trajectories

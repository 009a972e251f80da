#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Settings of the simulator.
"""

import json
from dataclasses import dataclass, asdict, fields
from enum import Enum
from pathlib import Path

from typing import List, Optional, Union


__all__ = [
    "InitialValue",
    "SimulationConfig",
]


class InitialValue(Enum):
    """Value assigned to every dynamic node when a simulation is initialized."""
    RANDOM = "random"
    TRUE = "true"
    FALSE = "false"


@dataclass
class SimulationConfig:
    """
    Simulation settings.

    **Members:**

        - sim_delay (float): Seconds between two iterations of a running
          simulation. Default 0.5.
        - one_click (bool): Start the simulation after a node is toggled.
        - initial_value (InitialValue): Initial value of every dynamic node.
        - guess_seed (bool): Take the initial state from the remote seed
          service instead of initial_value.
        - use_remote (bool): Delegate the successor computation of attractor
          searches to the remote stepping service.
        - server_url (str | None): Base URL of the remote service.
        - timeout (float): Timeout of remote requests in seconds.
        - sample_count (int): Number of random initial states per attractor
          search.
        - max_time_series_columns (int | None): Number of most recent
          iterations kept by the time series recorder; None keeps all.

    **Example:**

        >>> config = SimulationConfig(sim_delay=0.1, one_click=True)
        >>> config.save("simulation.json")
    """
    sim_delay: float = 0.5
    one_click: bool = False
    initial_value: InitialValue = InitialValue.RANDOM
    guess_seed: bool = False
    use_remote: bool = False
    server_url: Optional[str] = None
    timeout: float = 30.0
    sample_count: int = 30
    max_time_series_columns: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.initial_value, InitialValue):
            self.initial_value = InitialValue(self.initial_value)

    def save(self, path : Union[str, Path]) -> None:
        """Save configuration to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path : Union[str, Path]) -> "SimulationConfig":
        """Load configuration from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['initial_value'] = self.initial_value.value
        return data

    @classmethod
    def from_dict(cls, data : dict) -> "SimulationConfig":
        """Build a configuration from a dictionary, ignoring unknown keys."""
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in names})

    def validate(self, require_server_url : bool = True) -> List[str]:
        """
        Return a list of problems; an empty list means the configuration is
        usable. Pass require_server_url=False when the remote service is
        supplied directly instead of being built from server_url.
        """
        issues = []
        if self.sim_delay < 0:
            issues.append("sim_delay must be non-negative")
        if self.sample_count < 1:
            issues.append("sample_count must be at least 1")
        if self.timeout <= 0:
            issues.append("timeout must be positive")
        if require_server_url and (self.guess_seed or self.use_remote) and not self.server_url:
            issues.append("server_url is required when guess_seed or use_remote is set")
        if self.max_time_series_columns is not None and self.max_time_series_columns < 1:
            issues.append("max_time_series_columns must be at least 1 or None")
        return issues

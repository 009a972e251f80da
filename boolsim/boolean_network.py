#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Boolean networks given as tables of textual update rules.

This module defines the :class:`~boolsim.BooleanNetwork` class, which holds
the rule table of a network together with one compiled
:class:`~boolsim.UpdateRule` per dynamic node, and implements the
synchronous update. Nodes whose rule text is empty have no dynamics: they
are listed in ``nodes`` but are not part of any state.
"""

import logging

import numpy as np
import networkx as nx

from typing import Optional

try:
    import boolsim.utils as utils
    from boolsim.update_rule import UpdateRule, is_empty_rule
    from boolsim.state_codec import StateCodec
    from boolsim.exceptions import RuleCompilationError, StateMismatchError
    from boolsim.attractors import search_attractors, AttractorSearchResult
except ModuleNotFoundError:
    import utils
    from update_rule import UpdateRule, is_empty_rule
    from state_codec import StateCodec
    from exceptions import RuleCompilationError, StateMismatchError
    from attractors import search_attractors, AttractorSearchResult


__all__ = [
    "BooleanNetwork",
]

logger = logging.getLogger(__name__)


class BooleanNetwork(object):
    """
    A Boolean network defined by a rule table.

    **Constructor Parameters:**

        - rules (dict[str:str]): Maps each node id to its update rule text,
          e.g. ``{'A': '!B', 'B': 'A && C', 'C': ''}``. An empty (or None)
          rule marks a node without dynamics.

        - nodes (list[str], optional): All node ids of the network, in
          display order. Nodes missing from rules get an empty rule.
          Defaults to the keys of rules.

    **Members:**

        - rules (dict[str:str]): The rule table, one entry per node.
        - nodes (list[str]): All node ids.
        - variables (list[str]): Dynamic nodes (non-empty rule), in rule
          table order. This is the fixed node order of all states and keys.
        - N (int): Number of dynamic nodes.
        - F (dict[str:UpdateRule]): Compiled rule of each dynamic node.
        - codec (StateCodec): Key codec for the node order in variables.

    **Raises:**

        - RuleCompilationError: if any rule is malformed or references a
          node without dynamics or an unknown node.

    **Example:**

        >>> bn = BooleanNetwork({'A': '!B', 'B': '!A'})
        >>> state = {'A': False, 'B': False}
        >>> bn.step(state)
        ['A', 'B']
        >>> state
        {'A': True, 'B': True}
    """

    def __init__(self, rules : dict, nodes : Optional[list] = None):
        assert isinstance(rules, dict), "rules must be a dict mapping node ids to rule text"
        if nodes is None:
            nodes = list(rules)
        self.nodes = list(nodes)
        for node in rules:
            if node not in self.nodes:
                self.nodes.append(node)
        self.rules = {node: (rules.get(node) or '') for node in self.nodes}

        self.variables = [node for node in rules if not is_empty_rule(rules[node])]
        self.N = len(self.variables)
        self._variable_set = frozenset(self.variables)
        self.codec = StateCodec(self.variables)

        self.F = {}
        for node in self.variables:
            self.F[node] = UpdateRule(self.rules[node], variables=self._variable_set, name=node)
        logger.debug("compiled %d update rules (%d nodes without dynamics)",
                     self.N, len(self.nodes) - self.N)

    @classmethod
    def from_string(cls, network_string : str, separator : str = '=') -> "BooleanNetwork":
        """
        **Compatability Method:**

            Build a network from lines of the form ``node = rule``.

            Empty lines and lines starting with ``#`` are skipped. A
            trailing ``*`` on the node id (BooleanNet style) is ignored.

        **Returns:**

                - A BooleanNetwork object.
        """
        rules = {}
        for number, line in enumerate(network_string.splitlines(), start=1):
            line = line.strip()
            if line == '' or line.startswith('#'):
                continue
            if separator not in line:
                raise RuleCompilationError(f"line {number} has no separator {separator!r}: {line!r}")
            node, rule = line.split(separator, 1)
            node = node.strip().rstrip('*').strip()
            rules[node] = rule.strip()
        return cls(rules)

    def __len__(self):
        return self.N

    def __str__(self):
        return f"Boolean network of {self.N} dynamic nodes ({len(self.nodes)} nodes in total)"

    def __getitem__(self, node):
        return self.F[node]

    def __contains__(self, node):
        return node in self._variable_set

    def get_rule(self, node : str) -> str:
        """Return the rule text of a node (empty string for nodes without dynamics)."""
        return self.rules[node]

    def set_rule(self, node : str, text : str) -> UpdateRule:
        """
        Replace the rule text of a dynamic node and recompile its rule.

        Only the rule of this node is recompiled. The set of dynamic nodes is
        fixed once the network is built, so the new text must be non-empty.

        **Raises:**

            - RuleCompilationError: if node is not dynamic or text cannot be
              compiled. The previous rule then stays in effect.
        """
        if node not in self._variable_set:
            raise RuleCompilationError("only nodes with dynamics can be edited", rule=text, node=node)
        if is_empty_rule(text):
            raise RuleCompilationError("rule text must not be empty", rule=text, node=node)
        rule = UpdateRule(text, variables=self._variable_set, name=node)
        self.F[node] = rule
        self.rules[node] = text
        logger.info("updated rule of %s: %s", node, text)
        return rule

    def get_wiring_diagram(self) -> nx.DiGraph:
        """Directed graph with an edge regulator -> target for every rule reference."""
        G = nx.DiGraph()
        G.add_nodes_from(self.nodes)
        for node, rule in self.F.items():
            G.add_edges_from((regulator, node) for regulator in rule.regulators)
        return G

    def check_state(self, state : dict) -> None:
        if state.keys() != self._variable_set:
            missing = sorted(self._variable_set - state.keys())
            extra = sorted(set(state) - self._variable_set)
            raise StateMismatchError(f"state does not match the rule table (missing: {missing}, unknown: {extra})")

    def step(self, state : dict) -> list:
        """
        Perform one synchronous update of state, in place.

        All rules are evaluated on the unmodified input state before any
        value is written, so no rule sees a value computed in the same step.

        **Parameters:**

            - state (dict[str:bool]): Current state; modified in place.

        **Returns:**

            - list[str]: Ids of the nodes whose value changed, in node order.
              An empty list means state is a fixed point.

        **Raises:**

            - StateMismatchError: if the nodes of state differ from
              self.variables.
        """
        self.check_state(state)
        new_values = {node: self.F[node](state) for node in self.variables}
        changed = [node for node in self.variables if new_values[node] != state[node]]
        for node in changed:
            state[node] = new_values[node]
        return changed

    def update_network_synchronously(self, state : dict) -> dict:
        """
        Return the synchronous successor of state, leaving state untouched.
        """
        new_state = dict(state)
        self.step(new_state)
        return new_state

    def update_network_synchronously_many_times(self, state : dict, n_steps : int) -> dict:
        """
        Update a copy of state synchronously n_steps times and return it.
        """
        assert isinstance(n_steps, (int, np.integer)) and n_steps >= 0, "n_steps must be a non-negative integer"
        new_state = dict(state)
        for _ in range(n_steps):
            if not self.step(new_state):
                break
        return new_state

    def get_random_state(self, *, rng=None) -> dict:
        """
        Draw a state in which every dynamic node is independently True or
        False with probability 1/2.

        **Parameters:**

            - rng (None, optional): Argument for the random number generator,
              implemented in 'utils._coerce_rng'.
        """
        rng = utils._coerce_rng(rng)
        return self.codec.from_vector(rng.integers(2, size=self.N))

    def get_attractors_synchronous(self, nsim : int = 30,
        initial_sample_points : Optional[list] = None, remote=None,
        *, rng=None) -> AttractorSearchResult:
        """
        Sample the state space and detect attractors, see
        :func:`boolsim.attractors.search_attractors`.
        """
        return search_attractors(self, nsim, initial_states=initial_sample_points,
                                 remote=remote, rng=rng)

    def to_rboolnet(self) -> str:
        """
        **Compatability method:**

            Returns the rule table in R BoolNet format: a header line
            ``targets, factors`` followed by ``node, rule`` lines with
            ``&``, ``|``, ``!``, ``TRUE`` and ``FALSE``.
        """
        lines = ['targets, factors']
        for node in self.rules:
            lines.append(f'{node}, {self._export_rule(node, "&", "|", "!", "TRUE", "FALSE")}')
        return '\n'.join(lines) + '\n'

    def to_booleannet(self) -> str:
        """
        **Compatability method:**

            Returns the rule table in Python BooleanNet format:
            ``node* = rule`` lines with ``and``, ``or``, ``not``, ``True`` and
            ``False``.
        """
        lines = []
        for node in self.rules:
            lines.append(f'{node}* = {self._export_rule(node, "and", "or", "not", "True", "False")}')
        return '\n'.join(lines) + '\n'

    def _export_rule(self, node : str, AND : str, OR : str, NOT : str,
                     TRUE : str, FALSE : str) -> str:
        if node not in self.F:
            return ''
        return self.F[node].to_expression(AND=AND, OR=OR, NOT=NOT, TRUE=TRUE, FALSE=FALSE)

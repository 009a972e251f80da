#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions raised by boolsim.

Every error derives from :class:`BoolSimError`, and additionally from the
built-in exception closest in meaning, so callers may catch either.
"""

__all__ = [
    "BoolSimError",
    "RuleCompilationError",
    "StateEncodingError",
    "StateMismatchError",
    "RemoteServiceError",
]


class BoolSimError(Exception):
    """Base class for all boolsim errors."""


class RuleCompilationError(BoolSimError, ValueError):
    """
    An update rule could not be compiled.

    Raised for syntax errors (unbalanced parentheses, dangling operators,
    unknown characters) and for references to identifiers that are not
    dynamic nodes of the network.
    """

    def __init__(self, message, rule=None, node=None):
        self.rule = rule
        self.node = node
        if node is not None:
            message = f"rule of node {node!r}: {message}"
        super().__init__(message)


class StateEncodingError(BoolSimError, ValueError):
    """A state or state key does not match the node order of the codec."""


class StateMismatchError(BoolSimError, KeyError):
    """The node set of a state does not match the rule table."""

    def __str__(self):
        # KeyError quotes its argument, keep the message readable
        return str(self.args[0]) if self.args else ''


class RemoteServiceError(BoolSimError, RuntimeError):
    """The remote seeding/stepping service failed or answered malformed data."""

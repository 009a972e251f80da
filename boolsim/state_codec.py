#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Conversion between network states and compact state keys.

A state maps every dynamic node to a Boolean value. Its key is a string with
one character per node, ``'1'`` or ``'0'``, in a fixed node order. Keys serve
as node identities in the state transition graph and make visited-state
lookups cheap.
"""

import numpy as np

from typing import Sequence

try:
    import boolsim.utils as utils
    from boolsim.exceptions import StateEncodingError
except ModuleNotFoundError:
    import utils
    from exceptions import StateEncodingError


__all__ = [
    "StateCodec",
    "encode_state",
    "decode_state",
]


def encode_state(state : dict, variables : Sequence[str]) -> str:
    """
    Encode a state as a key, following the order of variables.

    **Raises:**

        - StateEncodingError: if state does not contain exactly the nodes
          in variables.
    """
    if len(state) != len(variables):
        missing = [var for var in variables if var not in state]
        known = set(variables)
        extra = [var for var in state if var not in known]
        raise StateEncodingError(f"state does not match the node order (missing: {missing}, unknown: {extra})")
    try:
        return ''.join('1' if state[var] else '0' for var in variables)
    except KeyError as e:
        raise StateEncodingError(f"state has no entry for node {e.args[0]!r}") from None


def decode_state(key : str, variables : Sequence[str]) -> dict:
    """
    Decode a key into a state, following the order of variables.

    **Raises:**

        - StateEncodingError: if the key has the wrong length or contains
          characters other than '0' and '1'.
    """
    if len(key) != len(variables):
        raise StateEncodingError(f"key {key!r} has length {len(key)}, expected {len(variables)}")
    state = {}
    for var, char in zip(variables, key):
        if char == '1':
            state[var] = True
        elif char == '0':
            state[var] = False
        else:
            raise StateEncodingError(f"invalid character {char!r} in key {key!r}")
    return state


class StateCodec(object):
    """
    Encoder/decoder bound to a fixed node order.

    **Constructor Parameters:**

        - variables (sequence[str]): The dynamic nodes, in the order used
          for both encoding and decoding.

    **Example:**

        >>> codec = StateCodec(['A', 'B', 'C'])
        >>> codec.encode({'A': True, 'B': False, 'C': True})
        '101'
        >>> codec.decode('011')
        {'A': False, 'B': True, 'C': True}
    """

    def __init__(self, variables : Sequence[str]):
        self.variables = tuple(variables)
        assert len(set(self.variables)) == len(self.variables), "node identifiers must be unique"

    def __len__(self):
        return len(self.variables)

    def encode(self, state : dict) -> str:
        return encode_state(state, self.variables)

    def decode(self, key : str) -> dict:
        return decode_state(key, self.variables)

    def to_vector(self, state : dict) -> np.ndarray:
        """State as a 0/1 integer vector in node order."""
        return np.array([int(ch) for ch in self.encode(state)], dtype=int)

    def from_vector(self, x) -> dict:
        """State from a 0/1 vector (list or np.array) in node order."""
        x = np.asarray(x)
        if x.shape != (len(self.variables),):
            raise StateEncodingError(f"vector of shape {x.shape} does not match {len(self.variables)} nodes")
        if not np.all((x == 0) | (x == 1)):
            raise StateEncodingError("state vectors may only contain 0 and 1")
        return {var: bool(value) for var, value in zip(self.variables, x)}

    def to_decimal(self, key : str) -> int:
        """Integer representation of a key, first node as most significant bit."""
        return utils.bin2dec(self.decode(key).values())

    def from_decimal(self, xdec : int) -> str:
        """Key of the state with integer representation xdec."""
        try:
            bits = utils.dec2bin(xdec, len(self.variables))
        except ValueError as e:
            raise StateEncodingError(str(e)) from None
        return ''.join(map(str, bits))

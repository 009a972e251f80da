#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Small helpers shared by the boolsim modules: random number generator
coercion and conversions between binary vectors and integers.
"""

from __future__ import annotations
import random as _py_random

import numpy as np
from numpy.random import Generator as _NPGen, RandomState as _NPRandomState, SeedSequence, default_rng

from typing import Union

__all__ = [
    "bin2dec",
    "dec2bin",
    "get_left_side_of_truth_table",
]

RandomLike = Union[int, _NPGen, _NPRandomState, _py_random.Random, None]


def _coerce_rng(rng : RandomLike = None) -> _NPGen:
    """
    Return a NumPy Generator given a variety of rng-like inputs.

    **Accepts:**

      - None                  -> default_rng()
      - int (seed)            -> default_rng(seed)
      - np.random.Generator   -> returned as-is
      - np.random.RandomState -> converted via SeedSequence
      - random.Random         -> converted via SeedSequence

    **Raises:**

        - TypeError: for unsupported inputs.
    """
    if rng is None:
        return default_rng()
    if isinstance(rng, _NPGen):
        return rng
    if isinstance(rng, (bool, np.bool_)):
        raise TypeError(f"Unsupported rng type: {type(rng)!r}")
    if isinstance(rng, (int, np.integer)):
        return default_rng(int(rng))
    if isinstance(rng, _NPRandomState):
        entropy = rng.randint(0, 2**32, size=4, dtype=np.uint32)
        return default_rng(SeedSequence(entropy))
    if isinstance(rng, _py_random.Random):
        entropy = [rng.getrandbits(32) for _ in range(4)]
        return default_rng(SeedSequence(entropy))
    raise TypeError(f"Unsupported rng type: {type(rng)!r}")


def bin2dec(binary_vector) -> int:
    """
    Convert a binary vector (most significant bit first) to an integer.

    **Parameters:**

        - binary_vector (list[int] | np.array[int]): Binary digits.

    **Returns:**

        - int: Integer value of the binary vector.
    """
    decimal = 0
    for bit in binary_vector:
        decimal = (decimal << 1) | int(bit)
    return decimal


def dec2bin(integer_value : int, num_bits : int) -> list:
    """
    Convert an integer to a binary vector of length num_bits.

    **Raises:**

        - ValueError: if integer_value does not fit into num_bits bits.
    """
    if integer_value < 0 or integer_value >= 2**num_bits:
        raise ValueError(f"{integer_value} cannot be represented with {num_bits} bits")
    if num_bits == 0:
        return []
    binary_string = bin(integer_value)[2:].zfill(num_bits)
    return [int(bit) for bit in binary_string]


_left_side_of_truth_tables = {}

def get_left_side_of_truth_table(n : int) -> np.ndarray:
    """
    All 2^n input combinations of n variables as a (2^n, n) uint8 matrix.

    Row i is the binary representation of i, first variable as the most
    significant bit. Matrices are cached per n.
    """
    try:
        return _left_side_of_truth_tables[n]
    except KeyError:
        pass
    vals = np.arange(2**n, dtype=np.uint64)[:, None]
    masks = (np.uint64(1) << np.arange(n-1, -1, -1, dtype=np.uint64))[None]
    table = ((vals & masks) != 0).astype(np.uint8)
    _left_side_of_truth_tables[n] = table
    return table

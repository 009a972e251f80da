import itertools

import numpy as np
import pytest

from boolsim import StateCodec, encode_state, decode_state, StateEncodingError


def test_encode_follows_node_order():
    codec = StateCodec(['B', 'A', 'C'])
    assert codec.encode({'A': True, 'B': False, 'C': True}) == '011'


def test_decode_round_trip_all_states():
    variables = ['x', 'y', 'z', 'w']
    codec = StateCodec(variables)
    for values in itertools.product([False, True], repeat=len(variables)):
        state = dict(zip(variables, values))
        assert codec.decode(codec.encode(state)) == state
        assert list(codec.decode(codec.encode(state))) == variables


def test_module_functions_match_codec():
    variables = ['A', 'B']
    state = {'A': True, 'B': False}
    assert encode_state(state, variables) == '10'
    assert decode_state('10', variables) == state


def test_partial_state_is_an_error():
    codec = StateCodec(['A', 'B'])
    with pytest.raises(StateEncodingError):
        codec.encode({'A': True})


def test_state_with_unknown_node_is_an_error():
    codec = StateCodec(['A', 'B'])
    with pytest.raises(StateEncodingError):
        codec.encode({'A': True, 'C': False})
    with pytest.raises(StateEncodingError):
        codec.encode({'A': True, 'B': True, 'C': False})


@pytest.mark.parametrize("key", ["1", "101", "1x", "  "])
def test_malformed_keys_are_errors(key):
    with pytest.raises(StateEncodingError):
        StateCodec(['A', 'B']).decode(key)


def test_vectors_and_decimals():
    codec = StateCodec(['A', 'B', 'C'])
    state = {'A': True, 'B': False, 'C': True}
    assert np.array_equal(codec.to_vector(state), [1, 0, 1])
    assert codec.from_vector(np.array([1, 0, 1])) == state
    assert codec.to_decimal('101') == 5
    assert codec.from_decimal(5) == '101'
    with pytest.raises(StateEncodingError):
        codec.from_decimal(8)
    with pytest.raises(StateEncodingError):
        codec.from_vector([1, 2, 0])


def test_empty_codec():
    codec = StateCodec([])
    assert codec.encode({}) == ''
    assert codec.decode('') == {}

import networkx as nx
import pytest

from boolsim import BooleanNetwork, search_attractors, RemoteServiceError, StateEncodingError


def toggle_network():
    return BooleanNetwork({'A': '!B', 'B': '!A'})


# ------------------------------------------------------------
# 1 Small networks with known attractors
# ------------------------------------------------------------

def test_two_cycle_from_equal_start_values():
    bn = toggle_network()
    graph, attractors = search_attractors(bn, initial_states=[{'A': False, 'B': False}])
    assert attractors == [['00', '11']]
    assert set(graph.edges) == {('00', '11'), ('11', '00')}


def test_two_cycle_traversed_from_other_side():
    bn = toggle_network()
    _, attractors = search_attractors(bn, initial_states=[{'A': True, 'B': True}])
    assert attractors == [['11', '00']]


def test_toggle_network_mixed_start_values_are_fixed_points():
    bn = toggle_network()
    graph, attractors = search_attractors(bn, initial_states=[{'A': True, 'B': False}, {'A': False, 'B': True}])
    assert attractors == [['10'], ['01']]
    assert graph.has_edge('10', '10') and graph.has_edge('01', '01')


def test_constant_rule_yields_fixed_point():
    bn = BooleanNetwork({'A': 'true'})
    for seed in range(5):
        graph, attractors = search_attractors(bn, 5, rng=seed)
        assert attractors == [['1']]
        assert bn.codec.decode(attractors[0][0]) == {'A': True}
        assert graph.nodes['1']['attractor'] == 0


def test_random_search_on_toggle_network():
    bn = toggle_network()
    graph, attractors = search_attractors(bn, 30, rng=1)
    valid = [['10'], ['01'], ['00', '11'], ['11', '00']]
    assert 1 <= len(attractors) <= 3
    assert all(attractor in valid for attractor in attractors)
    assert len(graph.graph['initial_states']) == 30
    # every attractor is a cycle of the transition graph
    cycles = [sorted(cycle) for cycle in nx.simple_cycles(graph)]
    for attractor in attractors:
        assert sorted(attractor) in cycles


# ------------------------------------------------------------
# 2 Graph construction
# ------------------------------------------------------------

def test_trajectories_merge_into_existing_nodes():
    bn = BooleanNetwork({'A': 'B', 'B': 'true'})
    initial_states = [
        {'A': False, 'B': False},
        {'A': False, 'B': True},
        {'A': True, 'B': False},
    ]
    graph, attractors = search_attractors(bn, initial_states=initial_states)
    assert attractors == [['11']]
    assert set(graph.nodes) == {'00', '01', '11', '10'}
    assert set(graph.edges) == {('00', '01'), ('01', '11'), ('11', '11'), ('10', '01')}
    assert graph.graph['initial_states'] == ['00', '01', '10']
    assert graph.nodes['10']['state'] == {'A': True, 'B': False}
    assert 'attractor' not in graph.nodes['00']


def test_cycle_reached_by_a_later_trajectory_is_not_reported_twice():
    bn = toggle_network()
    _, attractors = search_attractors(bn, initial_states=[{'A': False, 'B': False}, {'A': True, 'B': True}])
    assert attractors == [['00', '11']]


def test_initial_states_are_not_modified():
    bn = toggle_network()
    initial_states = [{'A': False, 'B': False}]
    search_attractors(bn, initial_states=initial_states)
    assert initial_states == [{'A': False, 'B': False}]


def test_longer_cycle_keeps_trajectory_order():
    # three-node ring oscillator
    bn = BooleanNetwork({'A': '!C', 'B': 'A', 'C': 'B'})
    _, attractors = search_attractors(bn, initial_states=[{'A': False, 'B': False, 'C': False}])
    assert attractors == [['000', '100', '110', '111', '011', '001']]


def test_mismatched_initial_state_raises():
    with pytest.raises(StateEncodingError):
        search_attractors(toggle_network(), initial_states=[{'A': True}])


def test_network_wrapper():
    bn = toggle_network()
    result = bn.get_attractors_synchronous(initial_sample_points=[{'A': True, 'B': False}])
    assert result.attractors == [['10']]


# ------------------------------------------------------------
# 3 Remote stepping
# ------------------------------------------------------------

class FakeRemote(object):
    """Stepping service computing trajectories locally."""

    def __init__(self, network, n_steps=10, n_trajectories=None):
        self.network = network
        self.n_steps = n_steps
        self.n_trajectories = n_trajectories
        self.requests = []

    def attractor_search(self, states):
        self.requests.append([dict(state) for state in states])
        trajectories = []
        for state in states:
            state = dict(state)
            trajectory = [dict(state)]
            for _ in range(self.n_steps):
                self.network.step(state)
                trajectory.append(dict(state))
            trajectories.append(trajectory)
        if self.n_trajectories is not None:
            trajectories = trajectories[:self.n_trajectories]
        return trajectories


def test_remote_results_match_local_search():
    bn = BooleanNetwork({'A': '!C', 'B': 'A', 'C': 'B'})
    remote = FakeRemote(bn)
    local = search_attractors(bn, 10, rng=3)
    delegated = search_attractors(bn, 10, rng=3, remote=remote)
    assert delegated.attractors == local.attractors
    assert set(delegated.graph.edges) == set(local.graph.edges)
    assert len(remote.requests) == 1
    assert len(remote.requests[0]) == 10


def test_remote_states_replace_local_steps():
    bn = toggle_network()

    class ConstantRemote(object):
        def attractor_search(self, states):
            return [[state] + [{'A': True, 'B': True}] * 3 for state in states]

    _, attractors = search_attractors(bn, initial_states=[{'A': False, 'B': False}], remote=ConstantRemote())
    # locally 00 -> 11 -> 00, remotely 11 is a fixed point
    assert attractors == [['11']]


def test_short_remote_trajectory_raises():
    bn = BooleanNetwork({'A': '!C', 'B': 'A', 'C': 'B'})
    with pytest.raises(RemoteServiceError):
        search_attractors(bn, initial_states=[{'A': False, 'B': False, 'C': False}],
                          remote=FakeRemote(bn, n_steps=2))


def test_missing_remote_trajectory_raises():
    bn = toggle_network()
    with pytest.raises(RemoteServiceError):
        search_attractors(bn, 4, rng=0, remote=FakeRemote(bn, n_trajectories=3))


def test_remote_state_for_wrong_nodes_raises():
    bn = toggle_network()

    class WrongRemote(object):
        def attractor_search(self, states):
            return [[state, {'A': True}] for state in states]

    with pytest.raises(RemoteServiceError):
        search_attractors(bn, initial_states=[{'A': False, 'B': False}], remote=WrongRemote())


def test_remote_trajectories_out_of_order_raise():
    bn = toggle_network()
    remote = FakeRemote(bn)

    class ReversedRemote(object):
        def attractor_search(self, states):
            return remote.attractor_search(states)[::-1]

    initial_states = [{'A': False, 'B': False}, {'A': True, 'B': False}]
    with pytest.raises(RemoteServiceError):
        search_attractors(bn, initial_states=initial_states, remote=ReversedRemote())


def test_empty_remote_trajectory_raises():
    bn = toggle_network()

    class EmptyRemote(object):
        def attractor_search(self, states):
            return [[] for _ in states]

    with pytest.raises(RemoteServiceError):
        search_attractors(bn, initial_states=[{'A': False, 'B': False}], remote=EmptyRemote())

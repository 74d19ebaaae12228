import pytest

from circuit_layout import BranchType, CircuitTopology, LayoutOptions, TopologyFormatError
from circuit_layout.engine.config import RouterConfig


PAYLOAD = {
    'nodes': [
        {'id': 'n1', 'connectedBranchIds': ['R1', 'V1']},
        {'id': 'n2', 'connectedBranchIds': ['R1', 'V1']},
    ],
    'branches': [
        {'id': 'R1', 'type': 'resistor', 'value': 100, 'fromNodeId': 'n1', 'toNodeId': 'n2'},
        {'id': 'V1', 'type': 'voltageSource', 'value': 5, 'fromNodeId': 'n2', 'toNodeId': 'n1'},
    ],
}


def test_topology_from_dict():
    topology = CircuitTopology.from_dict(PAYLOAD)

    assert [n.id for n in topology.nodes] == ['n1', 'n2']
    assert topology.nodes[0].connected_branch_ids == ('R1', 'V1')
    assert topology.nodes[0].degree == 2
    assert topology.branches[1].type is BranchType.VOLTAGE_SOURCE
    assert topology.branches[0].value == 100.0
    assert topology.branches[1].endpoints == ('n2', 'n1')


def test_topology_round_trips_to_editor_shape():
    topology = CircuitTopology.from_dict(PAYLOAD)
    assert CircuitTopology.from_dict(topology.to_dict()) == topology
    assert topology.to_dict()['branches'][0]['type'] == 'resistor'


@pytest.mark.parametrize(
    'payload, message_part',
    [
        ({'nodes': []}, "missing 'branches'"),
        ({'nodes': [{}], 'branches': []}, 'node #0 has no id'),
        (
            {'nodes': [], 'branches': [{'id': 'X', 'type': 'capacitor', 'fromNodeId': 'a', 'toNodeId': 'b'}]},
            "unknown type 'capacitor'",
        ),
        ({'nodes': [], 'branches': [{'id': 'X', 'type': 'resistor'}]}, 'fromNodeId, toNodeId'),
    ],
)
def test_malformed_topology_is_rejected(payload, message_part):
    with pytest.raises(TopologyFormatError) as exc:
        CircuitTopology.from_dict(payload)
    assert message_part in str(exc.value)


def test_layout_options_defaults():
    options = LayoutOptions()
    assert options.use_pattern_recognition is True
    assert options.prioritize_planarity is True
    assert options.annealing_iterations == 1000
    assert options.use_optimization is False
    assert options.random_seed is None


def test_layout_options_from_camel_case_mapping():
    options = LayoutOptions.from_mapping(
        {'usePatternRecognition': False, 'useOptimization': True, 'annealingIterations': '250', 'randomSeed': 7}
    )
    assert options.use_pattern_recognition is False
    assert options.use_optimization is True
    assert options.annealing_iterations == 250
    assert options.random_seed == 7


@pytest.mark.parametrize('values', [{'useMagic': True}, {'annealingIterations': -1}])
def test_layout_options_reject_bad_values(values):
    with pytest.raises(ValueError):
        LayoutOptions.from_mapping(values)


def test_layout_options_are_immutable():
    options = LayoutOptions()
    with pytest.raises(AttributeError):
        options.annealing_iterations = 5


def test_router_curve_offsets_are_ordered_floats():
    offsets = RouterConfig().curve_offsets
    assert offsets == (30.0, -30.0, 60.0)
    assert all(isinstance(offset, float) for offset in offsets)

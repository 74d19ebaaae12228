import numpy as np
import pytest

from circuit_layout.model import Branch, BranchType, ElectricalNode
from circuit_layout.symmetry import (
    HORIZONTAL,
    VERTICAL,
    SymmetryAxis,
    calculate_central_axis,
    find_isomorphic_subgraphs,
    group_parallel_branches,
    mirror_positions,
)


def resistor(branch_id, a, b):
    return Branch(branch_id, BranchType.RESISTOR, 1.0, a, b)


def test_parallel_groups_ignore_direction():
    branches = [resistor('b1', 'a', 'b'), resistor('b2', 'b', 'a'), resistor('b3', 'b', 'c')]
    groups = group_parallel_branches(branches)
    assert [[b.id for b in members] for members in groups.values()] == [['b1', 'b2'], ['b3']]


def test_parallel_members_become_subgraphs():
    nodes = [ElectricalNode('a', ('b1', 'b2')), ElectricalNode('b', ('b1', 'b2'))]
    branches = [resistor('b1', 'a', 'b'), resistor('b2', 'b', 'a')]

    subgraphs = find_isomorphic_subgraphs(nodes, branches)

    assert subgraphs[0].nodes == ('a', 'b') and subgraphs[0].branches == ('b1',)
    assert subgraphs[1].nodes == ('b', 'a') and subgraphs[1].branches == ('b2',)
    assert subgraphs[2].nodes == ('a', 'b')
    assert subgraphs[2].branches == ('b1', 'b2', 'b1', 'b2')
    assert len(subgraphs) == 3


def test_same_degree_pairing_is_greedy_in_order():
    nodes = [
        ElectricalNode('n1', ('x',)),
        ElectricalNode('n2', ('x', 'y')),
        ElectricalNode('n3', ('y',)),
        ElectricalNode('n4', ('z', 'w')),
        ElectricalNode('n5', ()),
        ElectricalNode('n6', ()),
    ]
    pairs = [sub.nodes for sub in find_isomorphic_subgraphs(nodes, [])]
    assert pairs == [('n1', 'n3'), ('n2', 'n4')]


@pytest.mark.parametrize(
    'coords, expected',
    [
        ([[0, 0], [100, 10]], SymmetryAxis(VERTICAL, 50.0)),
        ([[0, 0], [10, 100]], SymmetryAxis(HORIZONTAL, 50.0)),
        ([[0, 0], [40, 40]], SymmetryAxis(VERTICAL, 20.0)),
    ],
)
def test_central_axis(coords, expected):
    assert calculate_central_axis(np.array(coords, dtype=float)) == expected


def test_central_axis_of_nothing():
    assert calculate_central_axis(np.zeros((0, 2))) == SymmetryAxis(VERTICAL, 0.0)


def test_mirror_positions_returns_copy():
    coords = np.array([[10.0, 5.0], [50.0, -5.0]])
    vertical = mirror_positions(coords, SymmetryAxis(VERTICAL, 50.0))
    horizontal = mirror_positions(coords, SymmetryAxis(HORIZONTAL, 0.0))
    assert np.allclose(vertical, [[90.0, 5.0], [50.0, -5.0]])
    assert np.allclose(horizontal, [[10.0, -5.0], [50.0, 5.0]])
    assert np.allclose(coords, [[10.0, 5.0], [50.0, -5.0]])

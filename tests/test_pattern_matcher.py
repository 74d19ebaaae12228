import pytest

from circuit_layout.engine.pattern_matcher import (
    BRIDGE_TEMPLATE,
    PatternKind,
    collapse_patterns,
    expand_patterns,
    find_patterns,
)
from circuit_layout.model import Branch, BranchType, ElectricalNode, Point
from circuit_layout.validate import LayoutInvariantError


def resistor(branch_id, a, b):
    return Branch(branch_id, BranchType.RESISTOR, 1.0, a, b)


def graph(*edges, extra_nodes=()):
    branches = [resistor(f'b{i}', a, b) for i, (a, b) in enumerate(edges, start=1)]
    ids = []
    for a, b in edges:
        for node_id in (a, b):
            if node_id not in ids:
                ids.append(node_id)
    ids.extend(extra_nodes)
    nodes = [
        ElectricalNode(node_id, tuple(br.id for br in branches if node_id in br.endpoints))
        for node_id in ids
    ]
    return nodes, branches


DIAMOND = (('n1', 'n2'), ('n1', 'n3'), ('n2', 'n4'), ('n3', 'n4'))


def test_detects_bridge():
    nodes, branches = graph(*DIAMOND)

    patterns = find_patterns(nodes, branches)

    assert len(patterns) == 1
    bridge = patterns[0]
    assert bridge.kind is PatternKind.BRIDGE
    assert bridge.nodes == ('n1', 'n2', 'n3', 'n4')
    assert sorted(bridge.branches) == ['b1', 'b2', 'b3', 'b4']
    assert bridge.template == BRIDGE_TEMPLATE


def test_bridge_takes_priority_over_triangles():
    nodes, branches = graph(*DIAMOND, ('n2', 'n3'))
    patterns = find_patterns(nodes, branches)
    assert [p.kind for p in patterns] == [PatternKind.BRIDGE]


def test_detects_pi_section():
    nodes, branches = graph(('a', 'b'), ('b', 'c'), ('c', 'a'))
    patterns = find_patterns(nodes, branches)
    assert [(p.kind, p.nodes) for p in patterns] == [(PatternKind.PI, ('a', 'b', 'c'))]
    assert len(patterns[0].branches) == 3


def test_detects_t_junction():
    nodes, branches = graph(('c', 'l1'), ('c', 'l2'), ('c', 'l3'))
    patterns = find_patterns(nodes, branches)
    assert [(p.kind, p.nodes) for p in patterns] == [(PatternKind.T, ('c', 'l1', 'l2', 'l3'))]


def test_detects_series_chain():
    nodes, branches = graph(('a', 'b'), ('b', 'c'), ('c', 'd'))

    patterns = find_patterns(nodes, branches)

    assert [(p.kind, p.nodes) for p in patterns] == [(PatternKind.SERIES, ('a', 'b', 'c', 'd'))]
    assert [x for x, _ in patterns[0].template] == pytest.approx([0.0, 100 / 3, 200 / 3, 100.0])
    assert patterns[0].branches == ('b1', 'b2', 'b3')


@pytest.mark.parametrize(
    'edges, extra',
    [((), ()), ((), ('solo',)), ((('a', 'b'),), ())],
)
def test_small_graphs_have_no_patterns(edges, extra):
    nodes, branches = graph(*edges, extra_nodes=extra)
    assert find_patterns(nodes, branches) == []


def test_nodes_join_at_most_one_pattern():
    nodes, branches = graph(
        ('a', 'b'), ('b', 'c'), ('c', 'a'), ('c', 'd'), ('d', 'e'), ('e', 'f'), ('f', 'd')
    )
    patterns = find_patterns(nodes, branches)
    claimed = [node_id for p in patterns for node_id in p.nodes]
    assert len(claimed) == len(set(claimed))
    assert [p.kind for p in patterns] == [PatternKind.PI, PatternKind.PI]


def test_collapse_bridge_without_external_connections():
    nodes, branches = graph(*DIAMOND)

    simplified = collapse_patterns(nodes, branches, find_patterns(nodes, branches))

    assert simplified.nodes == ()
    assert simplified.branches == ()
    assert [s.id for s in simplified.super_nodes] == ['super_0']
    assert simplified.super_nodes[0].external_connections == ()


def test_collapse_keeps_external_node_and_rewires_branch():
    nodes, branches = graph(*DIAMOND, ('n4', 'n5'))

    simplified = collapse_patterns(nodes, branches, find_patterns(nodes, branches))

    assert [n.id for n in simplified.nodes] == ['n5']
    (super_node,) = simplified.super_nodes
    (connection,) = super_node.external_connections
    assert (connection.external_node_id, connection.internal_node_id, connection.branch_id) == ('n5', 'n4', 'b5')
    assert super_node.external_branch_ids == ('b5',)
    (rewired,) = simplified.branches
    assert rewired.id == 'b5'
    assert rewired.endpoints == ('super_0', 'n5')
    placement_ids = [n.id for n in simplified.placement_nodes()]
    assert placement_ids == ['n5', 'super_0']


def test_collapse_without_patterns_is_identity():
    nodes, branches = graph(('a', 'b'))
    simplified = collapse_patterns(nodes, branches, [])
    assert simplified.nodes == tuple(nodes)
    assert simplified.branches == tuple(branches)
    assert simplified.super_nodes == ()


def test_super_node_ids_avoid_existing_nodes():
    nodes, branches = graph(('super_0', 'b'), ('b', 'c'), ('c', 'super_0'), ('c', 'x'))
    patterns = find_patterns(nodes, branches)
    simplified = collapse_patterns(nodes, branches, patterns)
    assert simplified.super_nodes[0].id != 'super_0'
    assert simplified.super_nodes[0].id.startswith('super_0')


def test_expand_patterns_offsets_members_by_template():
    nodes, branches = graph(*DIAMOND, ('n4', 'n5'))
    simplified = collapse_patterns(nodes, branches, find_patterns(nodes, branches))
    positions = {'super_0': Point(10.0, 20.0), 'n5': Point(-50.0, 0.0)}

    unit = expand_patterns(simplified, positions)
    doubled = expand_patterns(simplified, positions, scale=2.0)

    assert unit == {
        'n5': Point(-50.0, 0.0),
        'n1': Point(10.0, 70.0),
        'n2': Point(60.0, 20.0),
        'n3': Point(60.0, 120.0),
        'n4': Point(110.0, 70.0),
    }
    assert doubled['n4'] == Point(210.0, 120.0)


def test_expand_patterns_requires_super_node_position():
    nodes, branches = graph(*DIAMOND)
    simplified = collapse_patterns(nodes, branches, find_patterns(nodes, branches))
    with pytest.raises(LayoutInvariantError):
        expand_patterns(simplified, {})

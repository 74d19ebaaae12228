import math

import pytest

from circuit_layout.engine.config import RouterConfig
from circuit_layout.engine.edge_router import arrow_for, route_edges
from circuit_layout.model import Branch, BranchType, Point
from circuit_layout.paths import EdgePath
from circuit_layout.validate import LayoutInvariantError


def resistor(branch_id, a, b):
    return Branch(branch_id, BranchType.RESISTOR, 1.0, a, b)


def test_single_resistor_routes_straight_with_zero_score():
    positions = {'n1': Point(-75.0, 0.0), 'n2': Point(75.0, 0.0)}

    routes = route_edges([resistor('r1', 'n1', 'n2')], positions)

    route = routes['r1']
    assert not route.is_curved
    assert route.score == 0.0
    assert route.descriptor == 'M -75 0 L 75 0'
    assert (route.arrow_point.x, route.arrow_point.y) == pytest.approx((0.0, 0.0))
    assert route.arrow_point.angle == pytest.approx(0.0)


def test_parallel_group_fans_out_symmetrically():
    positions = {'a': Point(0.0, 0.0), 'b': Point(100.0, 0.0)}
    branches = [resistor('p1', 'a', 'b'), resistor('p2', 'a', 'b'), resistor('p3', 'b', 'a')]

    routes = route_edges(branches, positions)

    assert all(route.is_curved for route in routes.values())
    offsets = [routes[b].path.control[1] for b in ('p1', 'p2')]
    assert offsets == pytest.approx([-40.0, 0.0])
    # p3 runs b -> a so its left normal points down
    assert routes['p3'].path.control[1] == pytest.approx(-40.0)
    assert all(math.isfinite(route.score) for route in routes.values())


def test_parallel_offsets_are_symmetric_around_zero():
    positions = {'a': Point(0.0, 0.0), 'b': Point(100.0, 0.0)}
    branches = [resistor(f'p{i}', 'a', 'b') for i in range(3)]

    routes = route_edges(branches, positions, RouterConfig(parallel_offset=40.0))

    offsets = [routes[f'p{i}'].path.control[1] for i in range(3)]
    assert offsets == pytest.approx([-40.0, 0.0, 40.0])
    assert len({round(o, 6) for o in offsets}) == 3


def test_curve_avoids_node_on_straight_line():
    positions = {'a': Point(-100.0, 0.0), 'm': Point(0.0, 0.0), 'c': Point(100.0, 0.0)}

    route = route_edges([resistor('r', 'a', 'c')], positions)['r']

    assert route.is_curved
    assert route.score == pytest.approx(10.0)
    assert route.path.control == pytest.approx((0.0, 30.0))
    assert route.arrow_point.y == pytest.approx(15.0)


def test_crossing_prior_edge_is_penalised():
    positions = {
        'a': Point(-100.0, 0.0),
        'b': Point(100.0, 0.0),
        'c': Point(0.0, -100.0),
        'd': Point(0.0, 100.0),
    }

    routes = route_edges([resistor('ab', 'a', 'b'), resistor('cd', 'c', 'd')], positions)

    assert routes['ab'].score == 0.0
    assert routes['cd'].score == pytest.approx(1000.0)
    assert not routes['cd'].is_curved


def test_edges_sharing_an_endpoint_do_not_count_as_crossings():
    positions = {'a': Point(0.0, 0.0), 'b': Point(100.0, 0.0), 'c': Point(100.0, 100.0)}

    routes = route_edges([resistor('ab', 'a', 'b'), resistor('bc', 'b', 'c')], positions)

    assert routes['bc'].score == 0.0
    assert not routes['bc'].is_curved


def test_zero_length_branch_routes_straight():
    positions = {'a': Point(5.0, 5.0)}

    route = route_edges([resistor('loop', 'a', 'a')], positions)['loop']

    assert not route.is_curved
    assert route.descriptor == 'M 5 5 L 5 5'
    assert route.arrow_point.angle == 0.0


def test_missing_position_fails_loudly():
    with pytest.raises(LayoutInvariantError) as exc:
        route_edges([resistor('r', 'a', 'b')], {'a': Point(0.0, 0.0)})
    assert 'b' in str(exc.value)


def test_non_finite_scores_are_never_selected():
    positions = {'a': Point(math.nan, 0.0), 'b': Point(100.0, 0.0), 'm': Point(50.0, 50.0)}
    with pytest.raises(LayoutInvariantError):
        route_edges([resistor('r', 'a', 'b')], positions)


def test_arrow_follows_curve_tangent():
    arrow = arrow_for(EdgePath((0.0, 0.0), (100.0, 0.0), control=(50.0, 50.0)))
    assert (arrow.x, arrow.y) == pytest.approx((50.0, 25.0))
    assert arrow.angle == pytest.approx(0.0)

    steep = arrow_for(EdgePath((0.0, 0.0), (0.0, 10.0)))
    assert steep.angle == pytest.approx(math.pi / 2)

import math

import numpy as np
import pytest

from circuit_layout.paths import EdgePath, extract_numbers, format_path, parse_path


def test_format_straight_path():
    assert format_path(EdgePath((0.0, 0.0), (100.0, -50.5))) == 'M 0 0 L 100 -50.5'


def test_format_curve_path_rounds_to_micro_units():
    path = EdgePath((0.0, 0.0), (100.0, 0.0), control=(50.0, 12.3456789))
    assert format_path(path) == 'M 0 0 Q 50 12.345679 100 0'


def test_format_never_emits_negative_zero():
    assert format_path(EdgePath((-1e-9, 0.0), (1.0, 1.0))) == 'M 0 0 L 1 1'


def test_format_rejects_non_finite():
    with pytest.raises(ValueError):
        format_path(EdgePath((math.nan, 0.0), (1.0, 1.0)))


def test_extract_numbers_handles_signs_and_exponents():
    assert extract_numbers('M 1e2 -2.5E-1 L .5 +3') == [100.0, -0.25, 0.5, 3.0]


def test_parse_path_reads_formatted_descriptors():
    curve = EdgePath((-75.5, 10.0), (75.0, -10.25), control=(0.0, 40.0))
    assert parse_path(format_path(curve)) == curve
    assert parse_path('M 1 2 L 3 4') == EdgePath((1.0, 2.0), (3.0, 4.0))


@pytest.mark.parametrize('descriptor', ['M 0 0 L 1', 'M 0 0 Q 1 1 2', 'M 0 0 Z'])
def test_parse_path_rejects_malformed(descriptor):
    with pytest.raises(ValueError):
        parse_path(descriptor)


def test_straight_path_sampling_and_derivative():
    path = EdgePath((0.0, 0.0), (10.0, 0.0))
    assert np.allclose(path.sample(3), [[0, 0], [5, 0], [10, 0]])
    assert path.derivative_at(0.5) == (10.0, 0.0)
    assert not path.is_curved
    assert path.polyline().shape == (2, 2)


def test_curve_samples_match_point_at():
    path = EdgePath((0.0, 0.0), (100.0, 0.0), control=(50.0, 50.0))
    samples = path.sample(11)
    assert samples.shape == (11, 2)
    for t, row in zip(np.linspace(0, 1, 11), samples):
        assert tuple(row) == pytest.approx(path.point_at(float(t)))
    assert path.polyline(10).shape == (11, 2)

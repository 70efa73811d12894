# FILE: tests/test_range_scale.py
import math

import pytest
import torch

from healpix_field_viewer.engine.range_scale import RangeScaler, ValueRange
from healpix_field_viewer.engine.session import make_scalers


def test_sentinel_means_autoscale():
    s = RangeScaler()
    s.reset_to_searching()
    assert s.autoscale
    assert s.input_range.min == math.inf
    assert s.input_range.max == -math.inf
    assert s.input_range.is_searching


def test_observe_brackets_values():
    s = RangeScaler()
    s.reset_to_searching()
    data = [3.0, -1.5, 7.25, 0.0]
    for v in data:
        s.observe(v)
    assert all(s.input_range.min <= v <= s.input_range.max for v in data)
    assert s.input_range.as_list() == [-1.5, 7.25]


def test_transform_maps_endpoints():
    s = RangeScaler(output_range=ValueRange(0.0, 0.1))
    s.compute_scaling(-2.0, 6.0)
    assert not s.autoscale
    assert s.transform_one(-2.0) == pytest.approx(0.0)
    assert s.transform_one(6.0) == pytest.approx(0.1)
    # no clamping outside the input range
    assert s.transform_one(10.0) == pytest.approx(0.15)


def test_transform_tensor():
    s = RangeScaler()
    s.autoscale_from(torch.tensor([2.0, 4.0, 6.0]))
    out = s.transform(torch.tensor([2.0, 4.0, 6.0]))
    assert torch.allclose(out, torch.tensor([0.0, 0.5, 1.0]))


def test_degenerate_range_maps_to_lower_bound():
    s = RangeScaler()
    s.compute_scaling(5.0, 5.0)
    assert s.transform_one(5.0) == 0.0
    assert s.transform_one(9.0) == 0.0


def test_finalize_requires_bounds():
    s = RangeScaler()
    with pytest.raises(ValueError):
        s.finalize_scaling()
    with pytest.raises(RuntimeError):
        s.transform_one(1.0)


def test_bind_rejects_inverted_range():
    with pytest.raises(ValueError):
        RangeScaler().bind(2.0, 1.0)


def test_relief_output_defaults_when_unset():
    colour, relief = make_scalers(None, None, None)
    assert colour.autoscale and relief.autoscale
    assert relief.output_range.as_list() == [0.0, 0.1]
    assert colour.output_range.as_list() == [0.0, 1.0]

    _, relief = make_scalers(None, None, (0.2, 0.5))
    assert relief.output_range.as_list() == [0.2, 0.5]


def test_colour_range_also_binds_relief():
    colour, relief = make_scalers((0.0, 10.0), None, None)
    assert not colour.autoscale
    assert relief.input_range.as_list() == [0.0, 10.0]

    _, relief = make_scalers((0.0, 10.0), (1.0, 2.0), None)
    assert relief.input_range.as_list() == [1.0, 2.0]


def test_observe_all_skips_nan_pixels():
    s = RangeScaler()
    s.reset_to_searching()
    s.observe_all(torch.tensor([1.0, float("nan"), 3.0, float("inf")]))
    assert s.input_range.as_list() == [1.0, 3.0]
    s.finalize_scaling()
    assert s.transform_one(3.0) == pytest.approx(1.0)


def test_observe_all_nothing_finite_stays_searching():
    s = RangeScaler()
    s.reset_to_searching()
    s.observe_all(torch.full((4,), float("nan")))
    assert s.input_range.is_searching
    with pytest.raises(ValueError):
        s.finalize_scaling()


def test_autoscale_from_after_bind_reports_autoscale():
    s = RangeScaler()
    s.bind(0.0, 1.0)
    assert not s.autoscale
    s.autoscale_from(torch.tensor([2.0, 4.0]))
    assert s.autoscale
    assert s.input_range.as_list() == [2.0, 4.0]

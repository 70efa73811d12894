# FILE: tests/test_resample.py
import healpy as hp
import numpy as np
import pytest
import torch

from healpix_field_viewer.engine.errors import ReduceTooLarge
from healpix_field_viewer.engine.resample import downsample
from healpix_field_viewer.engine.spherical_field import Ordering, SphericalField


def _field(nside, ordering, values=None):
    if values is None:
        g = torch.Generator().manual_seed(0)
        values = torch.randn((12 * nside * nside,), generator=g)
    return SphericalField(values=values, nside=nside, ordering=ordering)


def test_levels_zero_nest_is_identity():
    f = _field(8, Ordering.NEST)
    out = downsample(f, 0)
    assert out.ordering is Ordering.NEST
    assert out.nside == 8
    assert torch.equal(out.values, f.values)


def test_levels_zero_ring_is_reordered_to_nest():
    f = _field(8, Ordering.RING)
    out = downsample(f, 0)
    i_ring = hp.nest2ring(8, np.arange(12 * 64))
    assert out.ordering is Ordering.NEST
    assert torch.equal(out.values, f.values[torch.from_numpy(i_ring)])


def test_constant_field_stays_constant():
    for ordering in (Ordering.NEST, Ordering.RING):
        f = _field(16, ordering, torch.full((12 * 256,), 3.7))
        for levels in (1, 2, 3):
            out = downsample(f, levels)
            assert torch.allclose(out.values, torch.full_like(out.values, 3.7), atol=1e-5)


def test_output_length():
    f = _field(32, Ordering.RING)
    for levels in range(0, 5):
        out = downsample(f, levels)
        assert out.n_pixels == 12 * (32 // 2 ** levels) ** 2
        assert out.order == 5 - levels


def test_order2_reduce1_averages_children():
    f = _field(4, Ordering.NEST, torch.arange(192, dtype=torch.float32))
    out = downsample(f, 1)
    assert out.order == 1
    assert out.n_pixels == 48
    expected = torch.arange(48, dtype=torch.float32) * 4 + 1.5
    assert torch.allclose(out.values, expected)


def test_ring_reduce_matches_nest_reduce():
    nest = _field(8, Ordering.NEST)
    ring_values = torch.empty_like(nest.values)
    ring_values[torch.from_numpy(hp.nest2ring(8, np.arange(768)))] = nest.values
    ring = SphericalField(values=ring_values, nside=8, ordering=Ordering.RING)
    assert torch.allclose(downsample(ring, 2).values, downsample(nest, 2).values)


def test_reduce_too_large():
    f = _field(4, Ordering.NEST)
    with pytest.raises(ReduceTooLarge):
        downsample(f, 2)
    with pytest.raises(ReduceTooLarge):
        downsample(f, -1)


def test_field_length_is_checked():
    with pytest.raises(ValueError):
        SphericalField(values=torch.zeros(100), nside=4, ordering=Ordering.NEST)

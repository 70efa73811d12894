# FILE: src/healpix_field_viewer/engine/resample.py
from __future__ import annotations

import numpy as np
import torch

from .errors import ReduceTooLarge
from .pixel_index import n_pixels, to_ring
from .spherical_field import Ordering, SphericalField


def check_reduction(order: int, levels: int) -> int:
    """
    Returns the order left after dropping `levels`, or raises ReduceTooLarge.
    """
    if levels < 0:
        raise ReduceTooLarge(f"order_reduce must be >= 0, got {levels}")
    reduced = order - levels
    if reduced < 1:
        raise ReduceTooLarge(f"Can't drop order {order} by {levels} (would leave order {reduced})")
    return reduced


def nest_source_values(field: SphericalField) -> torch.Tensor:
    """
    field values read in NEST pixel order, one RING lookup per pixel if needed.
    """
    if field.ordering is Ordering.NEST:
        return field.values
    i_nest = np.arange(field.n_pixels, dtype=np.int64)
    i_ring = torch.from_numpy(np.asarray(to_ring(field.nside, i_nest), dtype=np.int64))
    return field.values[i_ring.to(field.values.device)]


def downsample(field: SphericalField, levels: int) -> SphericalField:
    """
    Average a field into a map `levels` orders coarser.

    In NEST order the 4**levels children of a coarse pixel occupy one
    contiguous block, so the coarse index is the fine index shifted right by
    2 * levels bits. The result is always NEST ordered.
    """
    check_reduction(field.order, levels)
    nside_down = field.nside >> levels
    downmult = 1.0 / float(4 ** levels)

    src = nest_source_values(field)
    target = torch.arange(field.n_pixels, device=src.device, dtype=torch.int64) >> (2 * levels)

    out = torch.zeros((n_pixels(nside_down),), device=src.device, dtype=src.dtype)
    out.index_add_(0, target, src * downmult)
    return SphericalField(values=out, nside=nside_down, ordering=Ordering.NEST)

# FILE: src/healpix_field_viewer/engine/pixel_index.py
from __future__ import annotations

from typing import Tuple, Union

import healpy as hp
import numpy as np

IndexLike = Union[int, np.ndarray]


def order_of(nside: int) -> int:
    """
    log2(nside). Assumes nside is a power of two, as HEALPix maps always are.
    """
    return int(nside).bit_length() - 1


def n_pixels(nside: int) -> int:
    return 12 * nside * nside


def to_ring(nside: int, nest_index: IndexLike) -> IndexLike:
    return hp.nest2ring(nside, nest_index)


def to_angle(nside: int, nest_index: IndexLike) -> Tuple[IndexLike, IndexLike]:
    """
    Returns (colatitude, longitude) in radians.
    colatitude is 0 at the North pole and pi at the South pole.
    """
    theta, phi = hp.pix2ang(nside, nest_index, nest=True)
    return theta, phi

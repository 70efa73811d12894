# FILE: src/healpix_field_viewer/io/fits_field.py
from __future__ import annotations

import logging
import os
from typing import List, Tuple

import healpy as hp
import numpy as np
import torch

from ..engine.errors import LoadFailure
from ..engine.spherical_field import Ordering, SphericalField

logger = logging.getLogger(__name__)


def _header_value(header: List[Tuple[str, object]], key: str, default: str = "") -> str:
    for k, v in header:
        if str(k).upper() == key:
            return str(v)
    return default


def read_healpix_buffer(path: str) -> Tuple[int, str, torch.Tensor]:
    """
    Reads a HEALPix FITS map in its on-disk ordering.
    Returns (nside, ordering keyword, owned float32 tensor). The raw healpy
    buffer is copied out and dropped before returning, or before the
    LoadFailure propagates.
    """
    if not os.path.exists(path):
        raise LoadFailure(f"Failed to read the healpix map at {path}: no such file")
    try:
        raw, header = hp.read_map(path, nest=None, h=True, dtype=np.float32)
    except (OSError, ValueError, KeyError, IndexError, TypeError) as exc:
        raise LoadFailure(f"Failed to read the healpix map at {path}: {exc}") from exc

    try:
        nside = hp.get_nside(raw)
        values = torch.tensor(np.asarray(raw, dtype=np.float32))
    except (TypeError, ValueError) as exc:
        raise LoadFailure(f"Failed to read the healpix map at {path}: {exc}") from exc
    finally:
        del raw
    return int(nside), _header_value(header, "ORDERING", "RING"), values


def load_field(path: str) -> SphericalField:
    nside, ordering, values = read_healpix_buffer(path)
    field = SphericalField(values=values, nside=nside, ordering=Ordering.from_header(ordering))
    logger.info("Loaded nside=%d %s map from %s", field.nside, field.ordering.value, path)
    return field

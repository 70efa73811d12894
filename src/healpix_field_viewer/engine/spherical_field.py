# FILE: src/healpix_field_viewer/engine/spherical_field.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

import torch

from .pixel_index import n_pixels, order_of


class Ordering(Enum):
    RING = "RING"
    NEST = "NEST"

    @staticmethod
    def from_header(value: str) -> "Ordering":
        """
        FITS ORDERING keyword: "RING" or "NESTED". Anything not starting
        with R is treated as nested.
        """
        return Ordering.RING if str(value).strip().upper().startswith("R") else Ordering.NEST


@dataclass(frozen=True)
class SphericalField:
    values: torch.Tensor   # [12 * nside^2]
    nside: int
    ordering: Ordering

    def __post_init__(self) -> None:
        if self.values.ndim != 1:
            raise ValueError("Expected a flat [npix] tensor")
        if self.values.shape[0] != n_pixels(self.nside):
            raise ValueError(
                f"field has {self.values.shape[0]} pixels, nside={self.nside} needs {n_pixels(self.nside)}"
            )

    @property
    def order(self) -> int:
        return order_of(self.nside)

    @property
    def n_pixels(self) -> int:
        return int(self.values.shape[0])

    def value_range(self) -> tuple[float, float]:
        """Min and max over the finite pixels; (nan, nan) if there are none."""
        finite = self.values[torch.isfinite(self.values)]
        if finite.numel() == 0:
            return math.nan, math.nan
        return float(finite.min().item()), float(finite.max().item())

# FILE: src/healpix_field_viewer/engine/range_scale.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Union

import torch

Number = Union[float, torch.Tensor]


@dataclass
class ValueRange:
    """
    (min, max) pair. (+inf, -inf) is the "searching" sentinel: no bound
    supplied and no data scanned yet.
    """
    min: float = math.inf
    max: float = -math.inf

    def search_init(self) -> None:
        self.min = math.inf
        self.max = -math.inf

    def set(self, lo: float, hi: float) -> None:
        self.min = float(lo)
        self.max = float(hi)

    def update(self, value: float) -> None:
        v = float(value)
        if not math.isfinite(v):
            return
        self.min = min(self.min, v)
        self.max = max(self.max, v)

    @property
    def is_searching(self) -> bool:
        return self.min == math.inf and self.max == -math.inf

    @property
    def span(self) -> float:
        return self.max - self.min

    def as_list(self) -> list[float]:
        return [self.min, self.max]

    @staticmethod
    def searching() -> "ValueRange":
        return ValueRange()

    @staticmethod
    def from_pair(pair: Sequence[float] | None) -> "ValueRange":
        r = ValueRange()
        if pair is not None:
            r.set(pair[0], pair[1])
        return r


@dataclass
class RangeScaler:
    """
    Linear map from an input range onto an output range.

    The input range is either bound explicitly (bind/compute_scaling) or
    discovered by observing data while searching (do_autoscale). transform()
    does not clamp: values outside the input range extrapolate.
    """
    input_range: ValueRange = field(default_factory=ValueRange)
    output_range: ValueRange = field(default_factory=lambda: ValueRange(0.0, 1.0))
    do_autoscale: bool = True
    scale: float = 1.0
    offset: float = 0.0
    ready: bool = False

    def reset_to_searching(self) -> None:
        self.input_range.search_init()
        self.do_autoscale = True
        self.ready = False

    def bind(self, lo: float, hi: float) -> None:
        if hi < lo:
            raise ValueError(f"range max {hi} is below min {lo}")
        self.input_range.set(lo, hi)
        self.do_autoscale = False
        self.ready = False

    def observe(self, value: float) -> None:
        self.input_range.update(value)
        self.ready = False

    def observe_all(self, values: torch.Tensor) -> None:
        # NaN/inf pixels (masked or unseen) never widen the range.
        finite = values[torch.isfinite(values)]
        if finite.numel() == 0:
            return
        self.observe(float(finite.min().item()))
        self.observe(float(finite.max().item()))

    def finalize_scaling(self) -> None:
        if self.input_range.is_searching:
            raise ValueError("cannot compute scaling before the input range is known")
        span = self.input_range.span
        if span == 0.0:
            # Degenerate input: everything maps to the output lower bound.
            self.scale = 0.0
        else:
            self.scale = self.output_range.span / span
        self.offset = self.output_range.min - self.scale * self.input_range.min
        self.ready = True

    def compute_scaling(self, lo: float, hi: float) -> None:
        self.bind(lo, hi)
        self.finalize_scaling()

    def autoscale_from(self, values: torch.Tensor) -> None:
        """Scan `values` for the input range, then compute the transform."""
        self.input_range.search_init()
        self.do_autoscale = True
        self.observe_all(values)
        self.finalize_scaling()

    @property
    def autoscale(self) -> bool:
        return self.do_autoscale

    def transform(self, value: Number) -> Number:
        if not self.ready:
            raise RuntimeError("transform() called before finalize_scaling()")
        return value * self.scale + self.offset

    def transform_one(self, value: float) -> float:
        return float(self.transform(float(value)))

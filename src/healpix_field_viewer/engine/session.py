# FILE: src/healpix_field_viewer/engine/session.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Tuple

import numpy as np

from .projection_sync import ProjectionSync
from .range_scale import RangeScaler, ValueRange
from .resample import check_reduction, downsample
from .spherical_field import SphericalField

logger = logging.getLogger(__name__)

DEFAULT_RELIEF_OUTPUT: Tuple[float, float] = (0.0, 0.1)


@dataclass(frozen=True)
class PreparedField:
    source_path: str
    source_order: int
    field: SphericalField          # reduced, NEST ordered
    colour_scale: RangeScaler
    relief_scale: RangeScaler

    @property
    def order(self) -> int:
        return self.field.order

    @property
    def order_reduce(self) -> int:
        return self.source_order - self.field.order


def ordinal(n: int) -> str:
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n, "th")
    return f"{n}{suffix}"


def describe(prepared: PreparedField, colourmap_name: str) -> str:
    return (
        f"{ordinal(prepared.source_order)} order HEALPix data from {prepared.source_path} "
        f"plotted at {ordinal(prepared.order)} order (colourmap: {colourmap_name})"
    )


def make_scalers(
    colourmap_input_range: Optional[Tuple[float, float]],
    reliefmap_input_range: Optional[Tuple[float, float]],
    reliefmap_output_range: Optional[Tuple[float, float]],
) -> Tuple[RangeScaler, RangeScaler]:
    """
    Colour scaler onto [0, 1] and relief scaler onto the relief output range.
    A configured colour input range also binds the relief input range unless
    the relief range is configured separately.
    """
    if reliefmap_input_range is None:
        reliefmap_input_range = colourmap_input_range

    colour = RangeScaler()
    relief = RangeScaler()
    colour.reset_to_searching()
    relief.reset_to_searching()

    out = ValueRange.from_pair(reliefmap_output_range)
    if out.is_searching:
        out.set(*DEFAULT_RELIEF_OUTPUT)
    relief.output_range = out

    if colourmap_input_range is not None:
        colour.bind(*colourmap_input_range)
    if reliefmap_input_range is not None:
        relief.bind(*reliefmap_input_range)
    return colour, relief


def finalize_scaler(scaler: RangeScaler, field: SphericalField) -> None:
    # Autoscale iff the input range is still at the sentinel.
    if scaler.input_range.is_searching:
        scaler.autoscale_from(field.values)
    else:
        scaler.finalize_scaling()


def prepare_field(
    source_path: str,
    field: SphericalField,
    order_reduce: int,
    colourmap_input_range: Optional[Tuple[float, float]] = None,
    reliefmap_input_range: Optional[Tuple[float, float]] = None,
    reliefmap_output_range: Optional[Tuple[float, float]] = None,
) -> PreparedField:
    """
    One-shot setup: reduce the loaded field and compute both scalings.
    """
    check_reduction(field.order, order_reduce)
    reduced = downsample(field, order_reduce)
    lo, hi = reduced.value_range()
    logger.debug("pixeldata range: [%g, %g]", lo, hi)

    colour, relief = make_scalers(colourmap_input_range, reliefmap_input_range, reliefmap_output_range)
    finalize_scaler(colour, reduced)
    finalize_scaler(relief, reduced)

    return PreparedField(
        source_path=source_path,
        source_order=field.order,
        field=reduced,
        colour_scale=colour,
        relief_scale=relief,
    )


class SceneView(Protocol):
    def ready_to_finish(self) -> bool: ...
    def wait_events(self, timeout_s: float) -> None: ...
    def scene_rotation(self) -> np.ndarray: ...
    def left_button_pressed(self) -> bool: ...
    def render(self) -> None: ...


def run_view_loop(
    view: SceneView,
    sync: Optional[ProjectionSync],
    on_reproject: Callable[[np.ndarray], None],
    wait_s: float = 0.018,
) -> int:
    """
    Poll the view until it is done. Each tick, re-project when the scene
    rotated and the user is not dragging. Returns the number of re-projections.
    """
    n = 0
    while not view.ready_to_finish():
        view.wait_events(wait_s)
        if sync is None:
            continue
        req = sync.maybe_reproject(view.scene_rotation(), view.left_button_pressed())
        if req is not None:
            on_reproject(req.rotation)
            view.render()
            n += 1
    return n

# FILE: tests/test_session.py
import numpy as np
import pytest
import torch

from healpix_field_viewer.engine.errors import ReduceTooLarge
from healpix_field_viewer.engine.projection_sync import ProjectionSync, quat_from_axis_angle, quat_multiply
from healpix_field_viewer.engine.session import describe, ordinal, prepare_field, run_view_loop
from healpix_field_viewer.engine.spherical_field import Ordering, SphericalField

Q0 = quat_from_axis_angle((0, 0, 1), 0.2)


class FakeView:
    """Replays a scripted sequence of (rotation, dragging) ticks."""

    def __init__(self, ticks):
        self.ticks = list(ticks)
        self.i = -1
        self.renders = 0

    def ready_to_finish(self):
        return self.i + 1 >= len(self.ticks)

    def wait_events(self, timeout_s):
        self.i += 1

    def scene_rotation(self):
        return self.ticks[self.i][0]

    def left_button_pressed(self):
        return self.ticks[self.i][1]

    def render(self):
        self.renders += 1


def _field():
    return SphericalField(values=torch.linspace(0.0, 3.0, 192), nside=4, ordering=Ordering.NEST)


def test_loop_reprojects_only_after_drag_ends():
    q1 = quat_multiply(Q0, quat_from_axis_angle((1, 0, 0), 0.4))
    q2 = quat_multiply(q1, quat_from_axis_angle((0, 1, 0), 0.1))
    view = FakeView([
        (Q0, False),   # unchanged
        (q1, True),    # dragging
        (q1, True),
        (q1, False),   # released -> reproject
        (q1, False),   # unchanged
        (q2, False),   # rotated -> reproject
    ])
    applied = []
    n = run_view_loop(view, ProjectionSync.from_initial(Q0), applied.append, wait_s=0.0)
    assert n == 2
    assert view.renders == 2
    assert len(applied) == 2
    assert abs(np.linalg.norm(applied[-1]) - 1.0) < 1e-9


def test_loop_without_projection_never_reprojects():
    view = FakeView([(Q0, False), (quat_multiply(Q0, Q0), False)])
    assert run_view_loop(view, None, lambda q: None, wait_s=0.0) == 0


def test_prepare_autoscales_reduced_field():
    p = prepare_field("map.fits", _field(), 1)
    assert p.order == 1
    assert p.order_reduce == 1
    assert p.colour_scale.autoscale
    lo, hi = p.field.value_range()
    assert p.colour_scale.input_range.as_list() == [lo, hi]
    assert p.relief_scale.output_range.as_list() == [0.0, 0.1]
    assert p.colour_scale.transform_one(hi) == pytest.approx(1.0)


def test_prepare_rejects_large_reduce():
    with pytest.raises(ReduceTooLarge):
        prepare_field("map.fits", _field(), 2)


def test_describe():
    assert [ordinal(n) for n in (1, 2, 3, 4, 11)] == ["1st", "2nd", "3rd", "4th", "11th"]
    p = prepare_field("map.fits", _field(), 1)
    assert describe(p, "plasma") == "2nd order HEALPix data from map.fits plotted at 1st order (colourmap: plasma)"


def test_prepare_with_nan_pixel_autoscales_to_finite_range():
    v = torch.linspace(-1.0, 1.0, 192)
    v[5] = float("nan")
    field = SphericalField(values=v, nside=4, ordering=Ordering.NEST)
    prepared = prepare_field("map.fits", field, 0)
    lo, hi = prepared.colour_scale.input_range.as_list()
    assert np.isfinite(lo) and np.isfinite(hi)
    assert lo == pytest.approx(-1.0)
    assert hi == pytest.approx(1.0)
    assert field.value_range() == (lo, hi)

# FILE: src/healpix_field_viewer/viz/sphere_view.py
from __future__ import annotations

import math
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import torch

from ..engine.projection_sync import quat_from_axis_angle, quat_multiply
from ..engine.reproject import ProjectionType, latlong_to_xyz, pixel_latlong
from ..engine.session import PreparedField
from .colour import ColourMap
from .projection_plot import colour_bar_mappable, draw_projection


def view_quaternion(elev_deg: float, azim_deg: float, roll_deg: float = 0.0) -> np.ndarray:
    """Scene rotation of a matplotlib 3D camera: spin about z by azim, tilt by elev, then roll about the view axis."""
    q_azim = quat_from_axis_angle((0.0, 0.0, 1.0), -math.radians(azim_deg))
    q_elev = quat_from_axis_angle((1.0, 0.0, 0.0), -math.radians(elev_deg))
    q_roll = quat_from_axis_angle((0.0, 1.0, 0.0), -math.radians(roll_deg))
    return quat_multiply(q_roll, quat_multiply(q_elev, q_azim))


class MplSphereView:
    """
    matplotlib figure with the sphere as a 3D point cloud and, optionally, a
    2D projection panel. Implements the SceneView protocol used by
    run_view_loop.
    """

    def __init__(
        self,
        prepared: PreparedField,
        colour_map: ColourMap,
        title: str,
        use_relief: bool = False,
        projection: Optional[ProjectionType] = None,
        elev: float = 20.0,
        azim: float = -60.0,
        point_size: float = 6.0,
    ):
        self.projection = projection
        self._closed = False
        self._left_down = False
        self._proj_scatter = None

        field = prepared.field
        values = field.values.detach().float().cpu()
        xyz = latlong_to_xyz(pixel_latlong(field))
        if use_relief:
            radius = 1.0 + prepared.relief_scale.transform(values)
            xyz = xyz * radius[:, None]
        colours = colour_map(prepared.colour_scale.transform(values))

        n_cols = 2 if projection is not None else 1
        self.fig = plt.figure(figsize=(6 * n_cols, 6))
        self.fig.suptitle(title, fontsize=9)

        self.ax3d = self.fig.add_subplot(1, n_cols, 1, projection="3d")
        a = xyz.numpy()
        self.ax3d.scatter(a[:, 0], a[:, 1], a[:, 2], c=colours.numpy(), s=point_size, depthshade=False)
        self.ax3d.set_box_aspect((1, 1, 1))
        self.ax3d.set_xlabel("λ=0")
        self.ax3d.set_ylabel("λ=π/2")
        self.ax3d.set_zlabel("N")
        self.ax3d.view_init(elev=elev, azim=azim)
        self.fig.colorbar(
            colour_bar_mappable(prepared.colour_scale, colour_map.cmap),
            ax=self.ax3d, orientation="vertical", shrink=0.7,
        )

        if projection is not None:
            self.ax2d = self.fig.add_subplot(1, n_cols, 2)

        self.fig.canvas.mpl_connect("button_press_event", self._on_press)
        self.fig.canvas.mpl_connect("button_release_event", self._on_release)
        self.fig.canvas.mpl_connect("close_event", self._on_close)

    def _on_press(self, event) -> None:
        if event.button == 1:
            self._left_down = True

    def _on_release(self, event) -> None:
        if event.button == 1:
            self._left_down = False

    def _on_close(self, _event) -> None:
        self._closed = True

    def show_projection(self, xy: torch.Tensor, colours: torch.Tensor) -> None:
        if self.projection is None:
            return
        if self._proj_scatter is None:
            self._proj_scatter = draw_projection(self.ax2d, xy, colours, self.projection)
        else:
            self._proj_scatter.set_offsets(xy.detach().float().cpu().numpy())
            self._proj_scatter.set_facecolors(colours.detach().float().cpu().numpy())

    def ready_to_finish(self) -> bool:
        return self._closed

    def wait_events(self, timeout_s: float) -> None:
        plt.pause(timeout_s)

    def scene_rotation(self) -> np.ndarray:
        # Axes3D.roll exists on matplotlib >= 3.6
        return view_quaternion(self.ax3d.elev, self.ax3d.azim, getattr(self.ax3d, "roll", 0.0))

    def left_button_pressed(self) -> bool:
        return self._left_down

    def render(self) -> None:
        self.fig.canvas.draw_idle()

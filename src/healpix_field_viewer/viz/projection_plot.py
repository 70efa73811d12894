# FILE: src/healpix_field_viewer/viz/projection_plot.py
from __future__ import annotations

import os

import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from matplotlib.cm import ScalarMappable
from matplotlib.colors import Colormap, Normalize
import torch

from ..engine.range_scale import RangeScaler
from ..engine.reproject import ProjectionType


def colour_bar_mappable(colour_scale: RangeScaler, cmap: Colormap) -> ScalarMappable:
    """Colour bar ticks in data units: the input range mapped onto [0, 1]."""
    lo, hi = colour_scale.input_range.min, colour_scale.input_range.max
    sm = ScalarMappable(norm=Normalize(vmin=lo, vmax=hi if hi > lo else lo + 1.0), cmap=cmap)
    sm.set_array([])
    return sm


def draw_projection(ax: Axes, xy: torch.Tensor, colours: torch.Tensor, ptype: ProjectionType, point_size: float = 4.0):
    a = xy.detach().float().cpu().numpy()
    c = colours.detach().float().cpu().numpy()
    sc = ax.scatter(a[:, 0], a[:, 1], c=c, s=point_size, marker="s", linewidths=0)
    ax.set_aspect("equal")
    ax.set_xlabel(f"{ptype.value} projection")
    ax.set_xticks([])
    ax.set_yticks([])
    return sc


def save_projection(
    xy: torch.Tensor,
    colours: torch.Tensor,
    ptype: ProjectionType,
    colour_scale: RangeScaler,
    cmap: Colormap,
    out_path: str,
    title: str = "",
) -> None:
    """
    xy: [N, 2] projected coordinates, colours: [N, 3] RGB.
    Writes a PNG with a vertical colour bar.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)

    fig = plt.figure(figsize=(9, 5))
    ax = fig.add_subplot(1, 1, 1)
    if title:
        ax.set_title(title, fontsize=9)
    draw_projection(ax, xy, colours, ptype)
    fig.colorbar(colour_bar_mappable(colour_scale, cmap), ax=ax, orientation="vertical")
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
    plt.close(fig)

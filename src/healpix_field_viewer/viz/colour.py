# FILE: src/healpix_field_viewer/viz/colour.py
from __future__ import annotations

import logging

import matplotlib
import numpy as np
import torch
from matplotlib.colors import Colormap

logger = logging.getLogger(__name__)

DEFAULT_COLOURMAP = "plasma"


def resolve_colourmap(name: str) -> Colormap:
    try:
        return matplotlib.colormaps[name]
    except KeyError:
        logger.warning("Unknown colourmap %r, using %s", name, DEFAULT_COLOURMAP)
        return matplotlib.colormaps[DEFAULT_COLOURMAP]


class ColourMap:
    """
    Named palette: converts scaled values in [0, 1] into RGB rows.
    """

    def __init__(self, name: str = DEFAULT_COLOURMAP):
        self.cmap = resolve_colourmap(name)

    @property
    def name(self) -> str:
        return self.cmap.name

    def __call__(self, scaled: torch.Tensor) -> torch.Tensor:
        a = scaled.detach().float().cpu().numpy()
        rgba = self.cmap(np.clip(a, 0.0, 1.0))
        return torch.from_numpy(np.asarray(rgba[..., :3], dtype=np.float32))

    def convert(self, scaled: float) -> tuple[float, float, float]:
        r, g, b, _ = self.cmap(float(np.clip(scaled, 0.0, 1.0)))
        return (float(r), float(g), float(b))

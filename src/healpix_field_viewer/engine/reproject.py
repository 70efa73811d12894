# FILE: src/healpix_field_viewer/engine/reproject.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np
import torch

from .pixel_index import to_angle
from .projection_sync import quat_to_matrix
from .range_scale import RangeScaler
from .spherical_field import Ordering, SphericalField

# Maps scaled values in [0, 1] to RGB rows, [N] -> [N, 3]
ColourMapFn = Callable[[torch.Tensor], torch.Tensor]

MERCATOR_LAT_LIMIT = math.radians(85.0)


class ProjectionType(Enum):
    EQUIRECTANGULAR = "equirectangular"
    MERCATOR = "mercator"
    CASSINI = "cassini"


@dataclass(frozen=True)
class ProjectionBuffers:
    latlong: torch.Tensor   # [N, 2] (latitude, longitude), radians
    colours: torch.Tensor   # [N, 3] RGB


def pixel_latlong(field: SphericalField) -> torch.Tensor:
    """
    Latitude/longitude of every pixel centre of a NEST field.
    Latitude runs from -pi/2 (S) to pi/2 (N).
    """
    if field.ordering is not Ordering.NEST:
        raise ValueError("pixel_latlong expects a NEST ordered field")
    theta, phi = to_angle(field.nside, np.arange(field.n_pixels, dtype=np.int64))
    lat = 0.5 * np.pi - np.asarray(theta)
    return torch.from_numpy(np.stack([lat, np.asarray(phi)], axis=-1).astype(np.float32))


def latlong_to_xyz(latlong: torch.Tensor) -> torch.Tensor:
    lat, lon = latlong[:, 0], latlong[:, 1]
    c = torch.cos(lat)
    return torch.stack([c * torch.cos(lon), c * torch.sin(lon), torch.sin(lat)], dim=-1)


def xyz_to_latlong(xyz: torch.Tensor) -> torch.Tensor:
    z = xyz[:, 2].clamp(-1.0, 1.0)
    return torch.stack([torch.asin(z), torch.atan2(xyz[:, 1], xyz[:, 0])], dim=-1)


def rotate_latlong(latlong: torch.Tensor, rotation: np.ndarray) -> torch.Tensor:
    R = torch.from_numpy(quat_to_matrix(rotation)).to(dtype=latlong.dtype, device=latlong.device)
    xyz = latlong_to_xyz(latlong) @ R.T
    return xyz_to_latlong(xyz)


def wrap_longitude(lon: torch.Tensor) -> torch.Tensor:
    """Wraps into [-pi, pi)."""
    return torch.remainder(lon + math.pi, 2.0 * math.pi) - math.pi


def project_latlong(latlong: torch.Tensor, ptype: ProjectionType, radius: float = 1.0) -> torch.Tensor:
    """
    2D map coordinates [N, 2] for the chosen projection, scaled by radius.
    """
    lat = latlong[:, 0]
    lon = wrap_longitude(latlong[:, 1])

    if ptype is ProjectionType.EQUIRECTANGULAR:
        x, y = lon, lat
    elif ptype is ProjectionType.MERCATOR:
        lat_c = lat.clamp(-MERCATOR_LAT_LIMIT, MERCATOR_LAT_LIMIT)
        x, y = lon, torch.log(torch.tan(0.25 * math.pi + 0.5 * lat_c))
    elif ptype is ProjectionType.CASSINI:
        x = torch.asin((torch.cos(lat) * torch.sin(lon)).clamp(-1.0, 1.0))
        y = torch.atan2(torch.tan(lat), torch.cos(lon))
    else:
        raise ValueError(f"unhandled projection {ptype}")

    return torch.stack([x, y], dim=-1) * radius


def reproject(
    field: SphericalField,
    colour_scale: RangeScaler,
    colour_map: ColourMapFn,
    rotation: Optional[np.ndarray] = None,
) -> ProjectionBuffers:
    """
    Recompute the lat/long and colour buffers for a (reduced) NEST field,
    rotated by `rotation` relative to the initial view.
    """
    latlong = pixel_latlong(field)
    if rotation is not None:
        latlong = rotate_latlong(latlong, rotation)
    colours = colour_map(colour_scale.transform(field.values.detach().float().cpu()))
    return ProjectionBuffers(latlong=latlong, colours=colours)


def panel_coordinates(
    buffers: ProjectionBuffers,
    ptype: ProjectionType,
    radius: float = 1.0,
    position: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> torch.Tensor:
    """Projected [N, 2] coordinates placed at the panel position (z is unused in 2D)."""
    xy = project_latlong(buffers.latlong, ptype, radius)
    return xy + torch.tensor(position[:2], dtype=xy.dtype)

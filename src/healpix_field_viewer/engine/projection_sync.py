# FILE: src/healpix_field_viewer/engine/projection_sync.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

# Quaternions are float64 arrays in (w, x, y, z) order.
IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])


def as_quaternion(q: Sequence[float]) -> np.ndarray:
    a = np.asarray(q, dtype=np.float64).reshape(-1)
    if a.shape != (4,):
        raise ValueError(f"Expected 4 quaternion components (w, x, y, z), got {a.shape}")
    return a


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_inverse(q: np.ndarray) -> np.ndarray:
    n2 = float(np.dot(q, q))
    return np.array([q[0], -q[1], -q[2], -q[3]]) / n2


def quat_normalize(q: np.ndarray) -> np.ndarray:
    n = float(np.linalg.norm(q))
    if n == 0.0:
        raise ValueError("cannot normalize a zero quaternion")
    return q / n


def quat_from_axis_angle(axis: Sequence[float], angle_rad: float) -> np.ndarray:
    ax = np.asarray(axis, dtype=np.float64)
    x, y, z, w = Rotation.from_rotvec(ax / np.linalg.norm(ax) * angle_rad).as_quat()
    return np.array([w, x, y, z])


def quat_to_matrix(q: np.ndarray) -> np.ndarray:
    """3x3 rotation matrix of a quaternion (acts on column vectors)."""
    # scipy orders quaternions (x, y, z, w)
    return Rotation.from_quat(quat_normalize(q)[[1, 2, 3, 0]]).as_matrix()


def quat_close(a: np.ndarray, b: np.ndarray, eps: float) -> bool:
    # q and -q are the same rotation
    return bool(np.all(np.abs(a - b) <= eps) or np.all(np.abs(a + b) <= eps))


@dataclass(frozen=True)
class ReprojectionRequest:
    rotation: np.ndarray   # unit quaternion relative to the initial view


@dataclass
class ProjectionSync:
    """
    Tracks the scene rotation relative to the rotation at the time the 2D
    projection was created, and decides when the projection must be redone.
    """
    base_inverse: np.ndarray
    last_applied: np.ndarray = field(default_factory=lambda: IDENTITY.copy())
    eps: float = 1e-6

    @staticmethod
    def from_initial(initial_rotation: Sequence[float], eps: float = 1e-6) -> "ProjectionSync":
        q0 = quat_normalize(as_quaternion(initial_rotation))
        return ProjectionSync(base_inverse=quat_inverse(q0), eps=eps)

    def relative(self, current_rotation: Sequence[float]) -> np.ndarray:
        q = quat_multiply(self.base_inverse, as_quaternion(current_rotation))
        return quat_normalize(q)

    def maybe_reproject(
        self,
        current_rotation: Sequence[float],
        interaction_active: bool,
    ) -> Optional[ReprojectionRequest]:
        q = self.relative(current_rotation)
        if interaction_active or quat_close(q, self.last_applied, self.eps):
            return None
        self.last_applied = q
        return ReprojectionRequest(rotation=q.copy())

from __future__ import annotations
import math

import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def star_positions(directions: np.ndarray, distances: np.ndarray) -> np.ndarray:
    """
    Cartesian positions (pc) from vertex-table directions, same convention as
    the star vertex shader: x = declination, y = normalized ascension.
    """
    dec = directions[:, 0].astype(np.float64)
    asc = directions[:, 1].astype(np.float64)
    d = np.asarray(distances, dtype=np.float64)
    c = np.cos(dec)
    return np.stack([c * np.cos(asc) * d, np.sin(dec) * d, c * np.sin(asc) * d], axis=-1)


def look_rotation(yaw_deg: float, pitch_deg: float) -> np.ndarray:
    """4x4 model-view matrix of an observer at the origin turning yaw, then pitch."""
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    cy, sy = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)

    ry = np.array([[cy, 0, -sy, 0],
                   [0, 1, 0, 0],
                   [sy, 0, cy, 0],
                   [0, 0, 0, 1]], dtype=np.float64)
    rx = np.array([[1, 0, 0, 0],
                   [0, cp, sp, 0],
                   [0, -sp, cp, 0],
                   [0, 0, 0, 1]], dtype=np.float64)
    return rx @ ry


def perspective(fov_deg: float, aspect: float, near: float = 0.1, far: float = 1e6) -> np.ndarray:
    """OpenGL style projection matrix (vertical field of view)."""
    f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
    return np.array([[f / aspect, 0, 0, 0],
                     [0, f, 0, 0],
                     [0, 0, (far + near) / (near - far), 2 * far * near / (near - far)],
                     [0, 0, -1, 0]], dtype=np.float64)


def project_to_screen(points: np.ndarray, model_view: np.ndarray, projection: np.ndarray,
                      width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Project (N, 3) points to pixel coordinates.

    Returns:
        (xy, inside): (N, 2) pixel positions and a mask of points in front of
        the camera and inside the viewport
    """
    n = points.shape[0]
    homo = np.ones((n, 4), dtype=np.float64)
    homo[:, :3] = points
    clip = homo @ (projection @ model_view).T

    w = clip[:, 3]
    in_front = w > 1e-9
    safe_w = np.where(in_front, w, 1.0)
    ndc_x = clip[:, 0] / safe_w
    ndc_y = clip[:, 1] / safe_w

    inside = in_front & (np.abs(ndc_x) <= 1.0) & (np.abs(ndc_y) <= 1.0)
    xy = np.stack([(ndc_x + 1.0) * 0.5 * width, (1.0 - ndc_y) * 0.5 * height], axis=-1)
    return xy, inside

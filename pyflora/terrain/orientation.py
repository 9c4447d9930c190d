"""Orientation helpers for objects resting on terrain."""
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation as R

EulerAngles = Tuple[float, float, float]


def normal_to_euler_angles(terrain_normal, yaw_degrees: float) -> EulerAngles:
    """Euler angles (pitch, yaw, roll) that tilt +Y onto ``terrain_normal`` after yawing."""
    yaw_rotation = R.from_euler('y', yaw_degrees, degrees=True)
    source_up = np.array([0.0, 1.0, 0.0])
    normal = np.asarray(terrain_normal, dtype=float)
    norm = np.linalg.norm(normal)
    if norm < 1e-6:
        normal = source_up
    else:
        normal = normal / norm
    axis = np.cross(source_up, normal)
    angle = np.arccos(np.clip(np.dot(source_up, normal), -1.0, 1.0))
    if np.linalg.norm(axis) < 1e-6:
        tilt_rotation = R.identity() if angle < np.pi / 2 else R.from_euler('x', 180, degrees=True)
    else:
        tilt_rotation = R.from_rotvec(axis / np.linalg.norm(axis) * angle)
    final_rotation = tilt_rotation * yaw_rotation
    euler_angles = final_rotation.as_euler('yxz', degrees=True)
    pitch, yaw, roll = euler_angles[1], euler_angles[0], euler_angles[2]
    if roll < 0:
        roll += 360
    if yaw < 0:
        yaw += 360
    return (float(pitch), float(yaw), float(roll))


def yaw_only(yaw_degrees: float) -> EulerAngles:
    """Upright orientation rotated about Y."""
    return (0.0, float(yaw_degrees) % 360.0, 0.0)


def up_vector(euler: EulerAngles) -> Tuple[float, float, float]:
    """Local +Y axis of an orientation produced by :func:`normal_to_euler_angles`."""
    pitch, yaw, roll = euler
    rotation = R.from_euler('yxz', [yaw, pitch, roll], degrees=True)
    up = rotation.apply([0.0, 1.0, 0.0])
    return (float(up[0]), float(up[1]), float(up[2]))

"""Recorded (Z-up) space to renderer (Y-up) space."""

from __future__ import annotations

import math

from .geom import Vec3
from .playback import Pose


def remap_z_up(point: Vec3) -> Vec3:
    return Vec3(point.x, point.z, -point.y)


def world_position(pose: Pose, *, eye_height: float = 0.0) -> Vec3:
    offset = pose.zone_offset
    recorded = Vec3(
        pose.position.x + offset.x,
        pose.position.y + offset.y,
        pose.position.z + float(eye_height),
    )
    return remap_z_up(recorded)


def view_direction(pose: Pose) -> Vec3:
    # Positive pitch looks down.
    pitch = math.radians(pose.pitch)
    yaw = math.radians(pose.yaw)
    forward = Vec3(
        math.cos(pitch) * math.cos(yaw),
        math.cos(pitch) * math.sin(yaw),
        -math.sin(pitch),
    )
    return remap_z_up(forward)


def camera_rotation(pose: Pose) -> tuple[float, float]:
    """Renderer camera (x, y) Euler rotation in radians, YXZ order."""
    return math.radians(-pose.pitch), math.radians(pose.yaw - 90.0)

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..effect import Effect
from ..models import VisualObject
from ..properties import Property, slider

_LOGGER = logging.getLogger("midiviz.effects.rotation")


def euler_matrix(x_degrees: float, y_degrees: float, z_degrees: float) -> np.ndarray:
    """Rotation matrix for Euler angles applied in Y, X, Z order."""
    rx, ry, rz = np.radians([x_degrees, y_degrees, z_degrees])
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    return np.array(
        [
            [cy * cz + sy * sx * sz, -cy * sz + sy * sx * cz, sy * cx],
            [cx * sz, cx * cz, -sx],
            [-sy * cz + cy * sx * sz, sy * sz + cy * sx * cz, cy * cx],
        ],
        dtype=np.float64,
    )


def axis_angle_matrix(axis: np.ndarray, angle: float) -> np.ndarray:
    """Rodrigues rotation about a unit ``axis`` by ``angle`` radians."""
    x, y, z = axis
    cross = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])
    return np.eye(3) + math.sin(angle) * cross + (1.0 - math.cos(angle)) * (cross @ cross)


def _rotate_positions(
    objects: Sequence[VisualObject], matrix: np.ndarray, *, skip_unplaced: bool
) -> list[VisualObject]:
    result: list[VisualObject] = []
    for obj in objects:
        if skip_unplaced and obj.properties.position is None:
            result.append(obj)
            continue
        x, y, z = (matrix @ np.asarray(obj.position_or_origin(), dtype=np.float64)).tolist()
        result.append(obj.with_properties(position=(x, y, z)))
    return result


class Rotate3DEffect(Effect):
    """Rotates every position about the origin by fixed Euler angles (degrees)."""

    type_name = "Rotate3DEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("rotationX", 0.0, label="Rotation X", min=-360.0, max=360.0, step=1.0),
            slider("rotationY", 0.0, label="Rotation Y", min=-360.0, max=360.0, step=1.0),
            slider("rotationZ", 0.0, label="Rotation Z", min=-360.0, max=360.0, step=1.0),
        ]

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        matrix = euler_matrix(
            float(self.get_property("rotationX")),
            float(self.get_property("rotationY")),
            float(self.get_property("rotationZ")),
        )
        return _rotate_positions(objects, matrix, skip_unplaced=False)


class GlobalRotateEffect(Effect):
    """Spins the scene about an axis through the origin.

    ``speedFactor`` is in turns per beat, so the angle at ``time`` is
    ``speedFactor * 2 * pi * time``. Objects without a position are left alone.
    """

    type_name = "GlobalRotateEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("axisX", 0.0, label="Axis X", min=-1.0, max=1.0, step=0.1),
            slider("axisY", 1.0, label="Axis Y", min=-1.0, max=1.0, step=0.1),
            slider("axisZ", 0.0, label="Axis Z", min=-1.0, max=1.0, step=0.1),
            slider("speedFactor", 0.1, label="Speed (turns/beat)", min=-2.0, max=2.0, step=0.01),
        ]

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        speed = float(self.get_property("speedFactor"))
        if speed == 0:
            return list(objects)

        axis = np.array(
            [
                float(self.get_property("axisX")),
                float(self.get_property("axisY")),
                float(self.get_property("axisZ")),
            ],
            dtype=np.float64,
        )
        length = float(np.linalg.norm(axis))
        if length == 0:
            _LOGGER.debug("Zero rotation axis; leaving objects unrotated")
            return list(objects)

        matrix = axis_angle_matrix(axis / length, speed * 2.0 * math.pi * time)
        return _rotate_positions(objects, matrix, skip_unplaced=True)

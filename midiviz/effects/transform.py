from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ..effect import ObjectEffect
from ..models import Vec3, VisualObject
from ..properties import Property, color, number_input, slider


def _add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _mul(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] * b[0], a[1] * b[1], a[2] * b[2])


class PositionOffsetEffect(ObjectEffect):
    type_name = "PositionOffsetEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("offsetX", 0.0, label="Offset X", min=-10.0, max=10.0, step=0.1),
            slider("offsetY", 0.0, label="Offset Y", min=-10.0, max=10.0, step=0.1),
            slider("offsetZ", 0.0, label="Offset Z", min=-10.0, max=10.0, step=0.1),
        ]

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        offset = (
            float(self.get_property("offsetX")),
            float(self.get_property("offsetY")),
            float(self.get_property("offsetZ")),
        )
        return obj.with_properties(position=_add(obj.position_or_origin(), offset))


class ScaleEffect(ObjectEffect):
    """Scales the whole scene about the origin: positions and object sizes alike."""

    type_name = "ScaleEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [slider("scale", 1.0, label="Scale", min=0.1, max=10.0, step=0.1)]

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        factor = float(self.get_property("scale"))
        changes: dict[str, Any] = {}

        position = obj.properties.position
        if position is not None:
            changes["position"] = (position[0] * factor, position[1] * factor, position[2] * factor)

        match obj.properties.scale:
            case None:
                sx, sy, sz = obj.scale_vector()
                changes["scale"] = (sx * factor, sy * factor, sz * factor)
            case (sx, sy, sz):
                changes["scale"] = (sx * factor, sy * factor, sz * factor)
            case uniform:
                changes["scale"] = float(uniform) * factor
        return obj.with_properties(**changes)


class RescalePositionEffect(ObjectEffect):
    type_name = "RescalePositionEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("scaleX", 1.0, label="Scale X", min=0.0, max=5.0, step=0.05),
            slider("scaleY", 1.0, label="Scale Y", min=0.0, max=5.0, step=0.05),
            slider("scaleZ", 1.0, label="Scale Z", min=0.0, max=5.0, step=0.05),
        ]

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        factors = (
            float(self.get_property("scaleX")),
            float(self.get_property("scaleY")),
            float(self.get_property("scaleZ")),
        )
        return obj.with_properties(position=_mul(obj.position_or_origin(), factors))


class ColorEffect(ObjectEffect):
    type_name = "ColorEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [color("color", "#ffffff", label="Override Color")]

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        return obj.with_properties(color=str(self.get_property("color")))


class PanEffect(ObjectEffect):
    """Sways objects back and forth along a direction, one cycle every four beats."""

    type_name = "PanEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            number_input("directionX", 1.0, label="Direction X", min=-1.0, max=1.0, step=0.1),
            number_input("directionY", 0.0, label="Direction Y", min=-1.0, max=1.0, step=0.1),
            number_input("directionZ", 0.0, label="Direction Z", min=-1.0, max=1.0, step=0.1),
            slider("amount", 2.0, label="Pan Amount", min=0.0, max=20.0, step=0.1),
            slider("speedMultiplier", 1.0, label="Speed Multiplier", min=0.1, max=8.0, step=0.1),
        ]

    def pan_offset(self, time: float) -> Vec3:
        dx = float(self.get_property("directionX"))
        dy = float(self.get_property("directionY"))
        dz = float(self.get_property("directionZ"))
        magnitude = math.sqrt(dx * dx + dy * dy + dz * dz)
        if magnitude > 0:
            direction = (dx / magnitude, dy / magnitude, dz / magnitude)
        else:
            direction = (1.0, 0.0, 0.0)

        phase = (time / 4.0) * float(self.get_property("speedMultiplier")) * 2.0 * math.pi
        amount = math.sin(phase) * float(self.get_property("amount"))
        return (direction[0] * amount, direction[1] * amount, direction[2] * amount)

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        return obj.with_properties(position=_add(obj.position_or_origin(), self.pan_offset(time)))


class GravityEffect(ObjectEffect):
    """Adds one gravity step to each object's velocity, then moves it by that velocity.

    Velocity lives on the object, so the effect has no memory between frames.
    """

    type_name = "GravityEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("gravityX", 0.0, label="Gravity X", min=-5.0, max=5.0, step=0.1),
            slider("gravityY", -1.0, label="Gravity Y", min=-5.0, max=5.0, step=0.1),
            slider("gravityZ", 0.0, label="Gravity Z", min=-5.0, max=5.0, step=0.1),
            slider("gravityStrength", 0.05, label="Strength", min=0.0, max=1.0, step=0.005),
        ]

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        if float(self.get_property("gravityStrength")) == 0:
            return list(objects)
        return super().apply_effect(objects, time, bpm)

    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        strength = float(self.get_property("gravityStrength"))
        step = (
            float(self.get_property("gravityX")) * strength,
            float(self.get_property("gravityY")) * strength,
            float(self.get_property("gravityZ")) * strength,
        )
        velocity = _add(obj.properties.velocity or (0.0, 0.0, 0.0), step)
        return obj.with_properties(
            velocity=velocity,
            position=_add(obj.position_or_origin(), velocity),
        )

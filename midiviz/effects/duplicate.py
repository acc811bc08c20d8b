from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ..effect import Effect
from ..models import VisualObject
from ..properties import Property, slider


class RadialDuplicateEffect(Effect):
    """Keeps every object and adds ``numCopies`` copies on a circle around it.

    Copies sit at angles ``i / numCopies * 2 * pi`` in the XY plane, ``radius``
    away from the original.
    """

    type_name = "RadialDuplicateEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("numCopies", 3, label="Copies", min=1, max=24, step=1),
            slider("radius", 1.0, label="Radius", min=0.0, max=10.0, step=0.1),
        ]

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        copies = math.floor(float(self.get_property("numCopies")))
        radius = float(self.get_property("radius"))
        if copies <= 0 or radius <= 0:
            return list(objects)

        offsets = [
            (math.cos(i / copies * 2.0 * math.pi) * radius, math.sin(i / copies * 2.0 * math.pi) * radius)
            for i in range(copies)
        ]
        result = list(objects)
        for obj in objects:
            x, y, z = obj.position_or_origin()
            result.extend(obj.with_properties(position=(x + dx, y + dy, z)) for dx, dy in offsets)
        return result


class HorizontalDuplicateEffect(Effect):
    """Replaces each object with a row of copies along X centred on the original."""

    type_name = "HorizontalDuplicateEffect"

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider("numCopies", 3, label="Copies", min=1, max=10, step=1),
            slider("xSpread", 2.0, label="X Spread", min=0.0, max=10.0, step=0.1),
        ]

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        copies = max(1, math.floor(float(self.get_property("numCopies"))))
        spread = float(self.get_property("xSpread"))
        if copies <= 1 and spread == 0:
            return list(objects)

        result: list[VisualObject] = []
        for obj in objects:
            x, y, z = obj.position_or_origin()
            start = x - (copies - 1) * spread / 2.0
            result.extend(
                obj.with_properties(position=(start + i * spread, y, z)) for i in range(copies)
            )
        return result

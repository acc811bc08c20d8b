from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..effect import Effect
from ..models import VisualObject
from ..properties import Property, slider

_LOGGER = logging.getLogger("midiviz.effects.delay")

# Beats within which a query time counts as hitting an echo time.
ECHO_TOLERANCE = 0.01


@dataclass(frozen=True, slots=True)
class BufferedObject:
    snapshot: VisualObject
    emission_time: float


class DelayEffect(Effect):
    """Emits fading echoes of objects it has seen on earlier calls.

    Every call buffers the incoming objects with the call time. The ``k``-th
    echo of a buffered object appears on the call whose time is within
    :data:`ECHO_TOLERANCE` of ``emission + k * delayTime``, with its opacity
    scaled by ``feedback ** k``. Entries are dropped once their last echo time
    has passed. The buffer is keyed by absolute time and is not cleared when
    time moves backwards.
    """

    type_name = "DelayEffect"

    def __init__(self) -> None:
        super().__init__()
        self._buffer: list[BufferedObject] = []

    def declare_properties(self) -> Sequence[Property[Any]]:
        return [
            slider(
                "delayTime",
                1.0,
                label="Delay Time (beats)",
                description="Time between each echo in beats",
                min=0.1,
                max=10.0,
                step=0.1,
            ),
            slider(
                "feedback",
                0.5,
                label="Feedback",
                description="Opacity multiplier per echo",
                min=0.0,
                max=0.99,
                step=0.05,
            ),
            slider(
                "maxCopies",
                5,
                label="Max Echoes",
                description="Maximum number of echoes per object",
                min=1,
                max=20,
                step=1,
            ),
        ]

    @property
    def buffered(self) -> tuple[BufferedObject, ...]:
        return tuple(self._buffer)

    def _reset_state(self) -> None:
        self._buffer = []

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        delay = float(self.get_property("delayTime"))
        feedback = float(self.get_property("feedback"))
        max_copies = math.floor(float(self.get_property("maxCopies")))

        self._buffer.extend(BufferedObject(obj, time) for obj in objects)

        echoes: list[VisualObject] = []
        for entry in self._buffer:
            for k in range(1, max_copies + 1):
                if abs(time - (entry.emission_time + k * delay)) < ECHO_TOLERANCE:
                    opacity = entry.snapshot.properties.opacity
                    faded = (1.0 if opacity is None else opacity) * feedback**k
                    echoes.append(entry.snapshot.with_properties(opacity=max(0.0, faded)))
                    break

        before = len(self._buffer)
        self._buffer = [
            entry
            for entry in self._buffer
            if entry.emission_time + max_copies * delay >= time - ECHO_TOLERANCE
        ]
        if len(self._buffer) != before:
            _LOGGER.debug("Pruned %d delay entries at t=%.3f", before - len(self._buffer), time)

        return [*objects, *echoes]

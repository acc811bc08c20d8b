"""
Type tables used where synthesizers and effects cross the persistence
boundary.

A factory is a plain object built from an explicit list of entries. Callers
construct one per kind at start-up and hand it to whatever needs it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .effect import Effect
from .effects import (
    ColorEffect,
    DelayEffect,
    GlobalRotateEffect,
    GravityEffect,
    HorizontalDuplicateEffect,
    PanEffect,
    PositionOffsetEffect,
    RadialDuplicateEffect,
    RescalePositionEffect,
    Rotate3DEffect,
    ScaleEffect,
)
from .errors import UnknownTypeError
from .properties import PropertyOwner
from .synthesizer import Synthesizer
from .synthesizers import (
    ApproachingCubeSynth,
    BasicSynthesizer,
    GlowSynth,
    HiHatSynth,
    KickDrumSynth,
    MelodicOrbitSynth,
    PitchSphereSynth,
    RadialDrumSynth,
    SnareDrumSynth,
    SpiralSynth,
)

_LOGGER = logging.getLogger("midiviz.factory")

OwnerT = TypeVar("OwnerT", bound=PropertyOwner)


class InstanceRecord(BaseModel):
    """Persisted form of one synthesizer or effect."""

    type: str
    settings: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")


@dataclass(frozen=True, slots=True)
class TypeEntry(Generic[OwnerT]):
    type_name: str
    label: str
    category: str
    create: Callable[[], OwnerT]


def apply_serialized_properties(instance: PropertyOwner, values: Mapping[str, Any]) -> None:
    instance.apply_serialized_properties(values)


class TypeFactory(Generic[OwnerT]):
    def __init__(self, entries: Iterable[TypeEntry[OwnerT]], *, kind: str) -> None:
        self.kind = kind
        self._entries: dict[str, TypeEntry[OwnerT]] = {}
        for entry in entries:
            if entry.type_name in self._entries:
                raise ValueError(f"Duplicate {kind} type: {entry.type_name!r}")
            self._entries[entry.type_name] = entry

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def entry(self, type_name: str) -> TypeEntry[OwnerT]:
        try:
            return self._entries[type_name]
        except KeyError as exc:
            raise UnknownTypeError(type_name, kind=self.kind) from exc

    def entries(self) -> list[TypeEntry[OwnerT]]:
        return list(self._entries.values())

    def type_names(self) -> list[str]:
        return list(self._entries)

    def categories(self) -> dict[str, list[TypeEntry[OwnerT]]]:
        grouped: dict[str, list[TypeEntry[OwnerT]]] = {}
        for entry in self._entries.values():
            grouped.setdefault(entry.category, []).append(entry)
        return grouped

    def create(self, type_name: str) -> OwnerT:
        return self.entry(type_name).create()

    def serialize(self, instance: OwnerT) -> InstanceRecord:
        if instance.type_name not in self._entries:
            raise UnknownTypeError(instance.type_name, kind=self.kind)
        return InstanceRecord(type=instance.type_name, settings=instance.serialize_properties())

    def restore(self, record: InstanceRecord) -> OwnerT:
        instance = self.create(record.type)
        apply_serialized_properties(instance, record.settings)
        _LOGGER.debug("Restored %s %s", self.kind, record.type)
        return instance


def _entry(cls: type[OwnerT], label: str, category: str) -> TypeEntry[OwnerT]:
    return TypeEntry(type_name=cls.type_name, label=label, category=category, create=cls)


def build_synthesizer_factory() -> TypeFactory[Synthesizer]:
    entries: list[TypeEntry[Synthesizer]] = [
        _entry(BasicSynthesizer, "Basic Synth", "Melodic"),
        _entry(PitchSphereSynth, "Pitch Sphere", "Melodic"),
        _entry(SpiralSynth, "Spiral", "Melodic"),
        _entry(MelodicOrbitSynth, "Melodic Orbit", "Melodic"),
        _entry(GlowSynth, "Glow", "Melodic"),
        _entry(ApproachingCubeSynth, "Approaching Cube", "Melodic"),
        _entry(KickDrumSynth, "Kick Drum", "Percussive"),
        _entry(SnareDrumSynth, "Snare Drum", "Percussive"),
        _entry(HiHatSynth, "Hi-Hat", "Percussive"),
        _entry(RadialDrumSynth, "Radial Drum", "Percussive"),
    ]
    return TypeFactory(entries, kind="synthesizer")


def build_effect_factory() -> TypeFactory[Effect]:
    entries: list[TypeEntry[Effect]] = [
        _entry(PositionOffsetEffect, "Position Offset", "Transform"),
        _entry(ScaleEffect, "Scale", "Transform"),
        _entry(RescalePositionEffect, "Rescale Position", "Transform"),
        _entry(ColorEffect, "Color", "Transform"),
        _entry(PanEffect, "Pan", "Transform"),
        _entry(Rotate3DEffect, "Rotate 3D", "Transform"),
        _entry(GlobalRotateEffect, "Global Rotate", "Transform"),
        _entry(GravityEffect, "Gravity", "Transform"),
        _entry(RadialDuplicateEffect, "Radial Duplicate", "Transform"),
        _entry(HorizontalDuplicateEffect, "Horizontal Duplicate", "Transform"),
        _entry(DelayEffect, "Delay", "Time"),
    ]
    return TypeFactory(entries, kind="effect")

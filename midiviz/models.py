from __future__ import annotations

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Vec3: TypeAlias = tuple[float, float, float]

ORIGIN: Vec3 = (0.0, 0.0, 0.0)
UNIT_SCALE: Vec3 = (1.0, 1.0, 1.0)

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    alias_generator=to_camel,
    populate_by_name=True,
)


class MidiNote(BaseModel):
    """A note inside a block. ``start_beat`` is relative to the block start."""

    id: str
    pitch: int = Field(ge=0, le=127)
    velocity: int = Field(ge=0, le=127)
    start_beat: float
    duration: float

    model_config = _MODEL_CONFIG

    def is_well_formed(self) -> bool:
        return self.duration > 0


class MidiBlock(BaseModel):
    """A clip placed on a track, ``start_beat``/``end_beat`` in absolute beats."""

    id: str
    start_beat: float
    end_beat: float
    notes: tuple[MidiNote, ...] = ()

    model_config = _MODEL_CONFIG

    def is_well_formed(self) -> bool:
        return self.end_beat >= self.start_beat


class VisualProperties(BaseModel):
    color: str = "#ffffff"
    position: Vec3 | None = None
    rotation: Vec3 | None = None  # degrees
    scale: Vec3 | float | None = None
    opacity: float | None = None
    size: float | None = None
    velocity: Vec3 | None = None
    emissive: str | None = None
    emissive_intensity: float | None = None

    model_config = _MODEL_CONFIG


class VisualObject(BaseModel):
    """Render-ready descriptor produced by synthesizers and effects.

    Instances are frozen and every vector is a tuple, so pipeline stages can
    pass objects through untouched and build changed ones with
    :meth:`with_properties`.
    """

    type: str
    properties: VisualProperties
    source_note_id: str | None = None

    model_config = _MODEL_CONFIG

    def with_properties(self, **changes: Any) -> "VisualObject":
        properties = self.properties.model_copy(update=changes)
        return self.model_copy(update={"properties": properties})

    def position_or_origin(self) -> Vec3:
        return self.properties.position or ORIGIN

    def scale_vector(self) -> Vec3:
        scale = self.properties.scale
        match scale:
            case None:
                size = self.properties.size
                return UNIT_SCALE if size is None else (size, size, size)
            case tuple():
                return scale
            case _:
                value = float(scale)
                return (value, value, value)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

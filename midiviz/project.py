"""
JSON project documents and their conversion to live tracks.

Unknown synthesizer types fall back to ``BasicSynthesizer`` and unknown
effects are dropped, both with a warning, so an old project still opens.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .effect import Effect, EffectChain
from .errors import InvalidProjectError, UnknownTypeError
from .factory import InstanceRecord, TypeFactory
from .models import MidiBlock
from .synthesizer import Synthesizer
from .track import Track

_LOGGER = logging.getLogger("midiviz.project")

FALLBACK_SYNTHESIZER = "BasicSynthesizer"

_DOCUMENT_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


class TrackDocument(BaseModel):
    id: str
    name: str = ""
    is_muted: bool = False
    is_soloed: bool = False
    synthesizer: InstanceRecord = Field(
        default_factory=lambda: InstanceRecord(type=FALLBACK_SYNTHESIZER)
    )
    effects: tuple[InstanceRecord, ...] = ()
    blocks: tuple[MidiBlock, ...] = ()

    model_config = _DOCUMENT_CONFIG


class ProjectDocument(BaseModel):
    bpm: float | None = Field(default=None, gt=0)
    tracks: tuple[TrackDocument, ...] = ()

    model_config = _DOCUMENT_CONFIG


@dataclass
class Project:
    bpm: float
    tracks: list[Track] = field(default_factory=list)


def _restore_synthesizer(
    record: InstanceRecord, synthesizers: TypeFactory[Synthesizer], track_id: str
) -> Synthesizer:
    try:
        return synthesizers.restore(record)
    except UnknownTypeError as exc:
        _LOGGER.warning("Track %s: %s; using %s", track_id, exc, FALLBACK_SYNTHESIZER)
        return synthesizers.create(FALLBACK_SYNTHESIZER)


def _restore_effects(
    records: tuple[InstanceRecord, ...], effects: TypeFactory[Effect], track_id: str
) -> EffectChain:
    chain: list[Effect] = []
    for record in records:
        try:
            chain.append(effects.restore(record))
        except UnknownTypeError as exc:
            _LOGGER.warning("Track %s: %s; effect omitted", track_id, exc)
    return EffectChain(chain)


def load_project(
    data: ProjectDocument | dict[str, Any],
    synthesizers: TypeFactory[Synthesizer],
    effects: TypeFactory[Effect],
    *,
    default_bpm: float = 120.0,
) -> Project:
    if isinstance(data, ProjectDocument):
        document = data
    else:
        try:
            document = ProjectDocument.model_validate(data)
        except ValidationError as exc:
            raise InvalidProjectError(f"Invalid project document: {exc}") from exc

    tracks = [
        Track(
            id=doc.id,
            name=doc.name,
            synthesizer=_restore_synthesizer(doc.synthesizer, synthesizers, doc.id),
            effects=_restore_effects(doc.effects, effects, doc.id),
            blocks=list(doc.blocks),
            is_muted=doc.is_muted,
            is_soloed=doc.is_soloed,
        )
        for doc in document.tracks
    ]
    return Project(bpm=document.bpm if document.bpm is not None else default_bpm, tracks=tracks)


def dump_project(
    project: Project,
    synthesizers: TypeFactory[Synthesizer],
    effects: TypeFactory[Effect],
) -> dict[str, Any]:
    document = ProjectDocument(
        bpm=project.bpm,
        tracks=tuple(
            TrackDocument(
                id=track.id,
                name=track.name,
                is_muted=track.is_muted,
                is_soloed=track.is_soloed,
                synthesizer=synthesizers.serialize(track.synthesizer),
                effects=tuple(effects.serialize(effect) for effect in track.effects),
                blocks=tuple(track.blocks),
            )
            for track in project.tracks
        ),
    )
    return document.model_dump(mode="json", by_alias=True)


def read_project(path: str | Path) -> ProjectDocument:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidProjectError(f"Cannot read project {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidProjectError(f"Project {path} is not valid JSON: {exc}") from exc
    try:
        return ProjectDocument.model_validate(raw)
    except ValidationError as exc:
        raise InvalidProjectError(f"Project {path} does not match the schema: {exc}") from exc

from __future__ import annotations

from .effect import Effect, EffectChain, ObjectEffect
from .envelope import GATE, Envelope, amplitude, envelope_state, seconds_per_beat
from .errors import (
    InvalidProjectError,
    InvalidTempoError,
    MidiVizError,
    TrackRenderError,
    UnknownPropertyError,
    UnknownTypeError,
)
from .factory import (
    InstanceRecord,
    TypeEntry,
    TypeFactory,
    apply_serialized_properties,
    build_effect_factory,
    build_synthesizer_factory,
)
from .models import MidiBlock, MidiNote, Vec3, VisualObject, VisualProperties
from .project import Project, ProjectDocument, TrackDocument, dump_project, load_project, read_project
from .properties import Property, PropertyMetadata, PropertyOwner
from .synthesizer import AMPLITUDE_EPSILON, NoteContext, NoteSynthesizer, Synthesizer, iter_active_notes
from .track import (
    RenderObject,
    Track,
    TrackFrame,
    audible_tracks,
    evaluate_track,
    evaluate_tracks,
    to_render_objects,
)

__all__ = [
    "AMPLITUDE_EPSILON",
    "GATE",
    "Effect",
    "EffectChain",
    "Envelope",
    "InstanceRecord",
    "InvalidProjectError",
    "InvalidTempoError",
    "MidiBlock",
    "MidiNote",
    "MidiVizError",
    "NoteContext",
    "NoteSynthesizer",
    "ObjectEffect",
    "Project",
    "ProjectDocument",
    "Property",
    "PropertyMetadata",
    "PropertyOwner",
    "RenderObject",
    "Synthesizer",
    "Track",
    "TrackDocument",
    "TrackFrame",
    "TrackRenderError",
    "TypeEntry",
    "TypeFactory",
    "UnknownPropertyError",
    "UnknownTypeError",
    "Vec3",
    "VisualObject",
    "VisualProperties",
    "amplitude",
    "apply_serialized_properties",
    "audible_tracks",
    "build_effect_factory",
    "build_synthesizer_factory",
    "dump_project",
    "envelope_state",
    "evaluate_track",
    "evaluate_tracks",
    "iter_active_notes",
    "load_project",
    "read_project",
    "seconds_per_beat",
    "to_render_objects",
]

__version__ = "0.1.0"

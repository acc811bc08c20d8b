from __future__ import annotations


class MidiVizError(Exception):
    """Base error for the midiviz library."""


class UnknownTypeError(MidiVizError, KeyError):
    """Raised when a factory is asked for a type identifier it does not know."""

    def __init__(self, type_name: str, *, kind: str = "component") -> None:
        super().__init__(f"Unknown {kind} type: {type_name!r}")
        self.type_name = type_name
        self.kind = kind

    def __str__(self) -> str:
        return str(self.args[0])


class UnknownPropertyError(MidiVizError, KeyError):
    """Raised when a property name is not declared by a synthesizer or effect."""

    def __init__(self, owner: str, name: str) -> None:
        super().__init__(f"{owner} has no property {name!r}")
        self.owner = owner
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


class InvalidTempoError(MidiVizError, ValueError):
    """Raised when a tempo is not a positive number of beats per minute."""


class InvalidProjectError(MidiVizError):
    """Raised when a project document cannot be parsed or validated."""


class TrackRenderError(MidiVizError):
    """Raised when a track's synthesizer or effect chain fails for one frame."""

    def __init__(self, track_id: str, cause: BaseException) -> None:
        super().__init__(f"Track {track_id!r} failed: {type(cause).__name__}: {cause}")
        self.track_id = track_id
        self.cause = cause

from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from typing import overload

from .models import VisualObject
from .properties import PropertyOwner

_LOGGER = logging.getLogger("midiviz.effect")


class Effect(PropertyOwner):
    """One stage of a track's effect chain.

    ``apply_effect`` returns a new list and never mutates the objects it was
    given. Objects are frozen models, so a stage that leaves an object alone
    may pass the same instance through.
    """

    @abstractmethod
    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        """Transform ``objects`` at ``time`` (beats)."""


class ObjectEffect(Effect):
    """Effect that maps every object independently."""

    @abstractmethod
    def transform(self, obj: VisualObject, time: float, bpm: float) -> VisualObject:
        """Return the transformed object."""

    def apply_effect(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        return [self.transform(obj, time, bpm) for obj in objects]


class EffectChain:
    """Ordered effects of one track. The list position is the order."""

    def __init__(self, effects: Iterable[Effect] = ()) -> None:
        self._effects: list[Effect] = list(effects)

    def evaluate(self, objects: Sequence[VisualObject], time: float, bpm: float) -> list[VisualObject]:
        current = list(objects)
        for effect in self._effects:
            current = effect.apply_effect(current, time, bpm)
        return current

    def insert(self, template: Effect, index: int | None = None) -> Effect:
        """Insert a clone of ``template`` and return the clone.

        ``index`` defaults to the end. Anything outside ``0..len`` raises
        :class:`IndexError`.
        """
        if index is None:
            index = len(self._effects)
        if not 0 <= index <= len(self._effects):
            raise IndexError(f"insert index {index} out of range 0..{len(self._effects)}")
        effect = template.clone()
        self._effects.insert(index, effect)
        _LOGGER.debug("Inserted %s at %d", effect.type_name, index)
        return effect

    def append(self, template: Effect) -> Effect:
        return self.insert(template)

    def remove(self, index: int) -> Effect:
        self._check_index(index)
        return self._effects.pop(index)

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move an effect without cloning it, so its buffers survive the move."""
        self._check_index(from_index)
        self._check_index(to_index)
        effect = self._effects.pop(from_index)
        self._effects.insert(to_index, effect)

    def replace(self, index: int, effect: Effect) -> Effect:
        self._check_index(index)
        previous = self._effects[index]
        self._effects[index] = effect
        return previous

    def clone(self) -> EffectChain:
        return EffectChain(effect.clone() for effect in self._effects)

    def type_names(self) -> list[str]:
        return [effect.type_name for effect in self._effects]

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._effects):
            raise IndexError(f"effect index {index} out of range 0..{len(self._effects) - 1}")

    def __len__(self) -> int:
        return len(self._effects)

    def __iter__(self) -> Iterator[Effect]:
        return iter(self._effects)

    @overload
    def __getitem__(self, index: int) -> Effect: ...

    @overload
    def __getitem__(self, index: slice) -> list[Effect]: ...

    def __getitem__(self, index: int | slice) -> Effect | list[Effect]:
        return self._effects[index]

    def __repr__(self) -> str:
        return f"EffectChain({self.type_names()!r})"

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict

from .errors import UnknownPropertyError

_LOGGER = logging.getLogger("midiviz.properties")

UIType = Literal["slider", "number_input", "dropdown", "color", "color_range"]

T = TypeVar("T")
_OwnerT = TypeVar("_OwnerT", bound="PropertyOwner")


class DropdownOption(BaseModel):
    value: Any
    label: str

    model_config = ConfigDict(frozen=True, extra="forbid")


class PropertyMetadata(BaseModel):
    """UI hints for a property. Bounds are advisory and never enforced."""

    ui_type: UIType
    label: str
    description: str = ""
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: tuple[DropdownOption, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")


class Property(Generic[T]):
    """A named configuration value owned by exactly one synthesizer or effect."""

    __slots__ = ("name", "default", "value", "metadata")

    def __init__(self, name: str, default: T, metadata: PropertyMetadata) -> None:
        self.name = name
        self.default: T = copy.deepcopy(default)
        self.value: T = copy.deepcopy(default)
        self.metadata = metadata

    @property
    def ui_type(self) -> UIType:
        return self.metadata.ui_type

    @property
    def label(self) -> str:
        return self.metadata.label

    def reset(self) -> None:
        self.value = copy.deepcopy(self.default)

    def clone(self) -> Property[T]:
        cloned = Property(self.name, self.default, self.metadata)
        cloned.value = copy.deepcopy(self.value)
        return cloned

    def __repr__(self) -> str:
        return f"Property({self.name!r}, value={self.value!r})"


def slider(
    name: str,
    default: float,
    *,
    label: str,
    min: float,
    max: float,
    step: float,
    description: str = "",
) -> Property[float]:
    metadata = PropertyMetadata(
        ui_type="slider", label=label, description=description, min=min, max=max, step=step
    )
    return Property(name, default, metadata)


def number_input(
    name: str,
    default: float,
    *,
    label: str,
    min: float,
    max: float,
    step: float,
    description: str = "",
) -> Property[float]:
    metadata = PropertyMetadata(
        ui_type="number_input",
        label=label,
        description=description,
        min=min,
        max=max,
        step=step,
    )
    return Property(name, default, metadata)


def color(name: str, default: str, *, label: str, description: str = "") -> Property[str]:
    return Property(name, default, PropertyMetadata(ui_type="color", label=label, description=description))


def color_range(
    name: str, start_hue: float, end_hue: float, *, label: str, description: str = ""
) -> Property[dict[str, float]]:
    metadata = PropertyMetadata(ui_type="color_range", label=label, description=description)
    return Property(name, {"startHue": start_hue, "endHue": end_hue}, metadata)


def dropdown(
    name: str,
    default: T,
    *,
    label: str,
    options: Sequence[tuple[T, str]],
    description: str = "",
) -> Property[T]:
    metadata = PropertyMetadata(
        ui_type="dropdown",
        label=label,
        description=description,
        options=tuple(DropdownOption(value=value, label=text) for value, text in options),
    )
    return Property(name, default, metadata)


class PropertyOwner(ABC):
    """Shared configuration surface of synthesizers and effects.

    Each instance owns its property map outright. ``clone`` deep-copies every
    value and resets any temporal state, so two instances never alias.
    """

    type_name: ClassVar[str]

    def __init__(self) -> None:
        self._properties: dict[str, Property[Any]] = {}
        for prop in self.declare_properties():
            self._properties[prop.name] = prop

    @abstractmethod
    def declare_properties(self) -> Sequence[Property[Any]]:
        """Return the properties with their defaults, in display order."""

    @property
    def properties(self) -> Mapping[str, Property[Any]]:
        return MappingProxyType(self._properties)

    def _require(self, name: str) -> Property[Any]:
        try:
            return self._properties[name]
        except KeyError as exc:
            raise UnknownPropertyError(self.type_name, name) from exc

    def get_property(self, name: str) -> Any:
        return self._require(name).value

    def set_property(self, name: str, value: Any) -> None:
        self._require(name).value = copy.deepcopy(value)

    def with_property(self: _OwnerT, name: str, value: Any) -> _OwnerT:
        updated = self.clone()
        updated.set_property(name, value)
        return updated

    def clone(self: _OwnerT) -> _OwnerT:
        cloned = type(self)()
        cloned._properties = {name: prop.clone() for name, prop in self._properties.items()}
        cloned._reset_state()
        return cloned

    def _reset_state(self) -> None:
        """Drop temporal state. Stateless owners have nothing to drop."""

    def serialize_properties(self) -> dict[str, Any]:
        return {name: copy.deepcopy(prop.value) for name, prop in self._properties.items()}

    def apply_serialized_properties(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            prop = self._properties.get(name)
            if prop is None:
                _LOGGER.debug("Ignoring unknown setting %r for %s", name, self.type_name)
                continue
            prop.value = copy.deepcopy(value)

    def describe_properties(self) -> list[dict[str, Any]]:
        return [
            {
                "name": prop.name,
                "value": copy.deepcopy(prop.value),
                "default": copy.deepcopy(prop.default),
                **prop.metadata.model_dump(exclude_none=True, exclude_defaults=True),
                "ui_type": prop.ui_type,
                "label": prop.label,
            }
            for prop in self._properties.values()
        ]

    def __repr__(self) -> str:
        settings = ", ".join(f"{name}={prop.value!r}" for name, prop in self._properties.items())
        return f"{type(self).__name__}({settings})"

from .delay import ECHO_TOLERANCE, DelayEffect
from .duplicate import HorizontalDuplicateEffect, RadialDuplicateEffect
from .rotation import GlobalRotateEffect, Rotate3DEffect
from .transform import (
    ColorEffect,
    GravityEffect,
    PanEffect,
    PositionOffsetEffect,
    RescalePositionEffect,
    ScaleEffect,
)

__all__ = [
    "ECHO_TOLERANCE",
    "ColorEffect",
    "DelayEffect",
    "GlobalRotateEffect",
    "GravityEffect",
    "HorizontalDuplicateEffect",
    "PanEffect",
    "PositionOffsetEffect",
    "RadialDuplicateEffect",
    "RescalePositionEffect",
    "Rotate3DEffect",
    "ScaleEffect",
]

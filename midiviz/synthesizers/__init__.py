from .melodic import (
    ApproachingCubeSynth,
    BasicSynthesizer,
    GlowSynth,
    MelodicOrbitSynth,
    PitchSphereSynth,
    SpiralSynth,
)
from .percussion import HiHatSynth, KickDrumSynth, RadialDrumSynth, SnareDrumSynth

__all__ = [
    "ApproachingCubeSynth",
    "BasicSynthesizer",
    "GlowSynth",
    "HiHatSynth",
    "KickDrumSynth",
    "MelodicOrbitSynth",
    "PitchSphereSynth",
    "RadialDrumSynth",
    "SnareDrumSynth",
    "SpiralSynth",
]

# disc_world/night.py

"""
================================================================================
NIGHT TRANSITION
================================================================================
This module provides a class that eases the disc between day and night
shading. The front end ticks it once per frame and reads the night amount
(fed to shade_disc_top) and the light intensities derived from it.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Optional overrides for the easing rate and intensities.
- Public Methods:
    - set_night_mode(on): Chooses the target state.
    - update(): Moves the night amount one step towards the target.
- Public Properties:
    - night_amount (float): 0 = full day, 1 = full night.
    - ambient_intensity, sun_intensity (float): Light levels for the scene.
- Side Effects: None.
- Invariants: night_amount stays within [0, 1] and approaches the target
  monotonically.
================================================================================
"""
import numpy as np

from . import config as DEFAULTS


def _lerp_float(val1: float, val2: float, t: float) -> float:
    """Linearly interpolates between two float values."""
    t = np.clip(t, 0.0, 1.0)
    return float(val1 * (1 - t) + val2 * t)


class NightTransition:
    """Eases the shading between day and night."""

    def __init__(self, config: dict = None):
        config = config or {}
        self.ease_rate = config.get('night_ease_rate', DEFAULTS.NIGHT_EASE_RATE)
        if not 0 < self.ease_rate <= 1:
            raise ValueError(f"Night ease rate must be in (0, 1], got {self.ease_rate}")
        self.ambient_day = config.get('ambient_day_intensity', DEFAULTS.AMBIENT_DAY_INTENSITY)
        self.ambient_drop = config.get('ambient_night_drop', DEFAULTS.AMBIENT_NIGHT_DROP)
        self.sun_day = config.get('sun_day_intensity', DEFAULTS.SUN_DAY_INTENSITY)
        self.sun_drop = config.get('sun_night_drop', DEFAULTS.SUN_NIGHT_DROP)

        self.night_mode = False
        self.night_amount = 0.0

    def set_night_mode(self, on: bool):
        self.night_mode = bool(on)

    def update(self):
        """Moves the night amount a fixed fraction of the way to its target."""
        target = 1.0 if self.night_mode else 0.0
        self.night_amount = _lerp_float(self.night_amount, target, self.ease_rate)

    @property
    def ambient_intensity(self) -> float:
        return self.ambient_day - self.night_amount * self.ambient_drop

    @property
    def sun_intensity(self) -> float:
        return self.sun_day - self.night_amount * self.sun_drop

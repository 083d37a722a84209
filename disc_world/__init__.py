# disc_world/__init__.py

# This file makes the 'disc_world' directory a Python package.
# We can also use it to define the public API of the package.

from .generator import DiscWorld, DiscWorldGenerator
from .projection import project, unproject, is_off_world
from .rng import SeededRandom

__all__ = ["DiscWorld", "DiscWorldGenerator", "SeededRandom", "project", "unproject", "is_off_world"]

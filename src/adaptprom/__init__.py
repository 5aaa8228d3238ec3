# __init__.py
"""Adaptive parametric reduced-order models for frequency-domain problems.

Reduced bases are built greedily from full-order solutions, steered by a
rational-interpolation error indicator, and reused for fast frequency
sweeps and nonlinear eigenvalue estimates.
"""

__version__ = "0.1.0"

from . import (
    basis,
    eigen,
    errors,
    fom,
    greedy,
    indicator,
    operators,
    parallel,
    roms,
    utils,
)

from .roms import *

"""
sgp4jax is an SGP4/SDP4 orbit propagator for two-line element sets, implemented in JAX.

Initialize an element set once with :func:`initialize`, then evaluate the
returned bundle at any time with :func:`propagate` (one time, raises on
decay) or :func:`propagate_batch` (many times, per-time error codes).
Positions are in km and velocities in km/s in the TEME frame.
"""

from .config import set_dtype, get_dtype

from .constants import (
    GRAVITY_MODELS,
    WGS72,
    WGS72OLD,
    WGS84,
    EarthGravity,
)

from .errors import (
    ConvergenceWarning,
    DecayedOrbitError,
    DegenerateOrbitError,
    ErrorCode,
    SGP4Error,
    SubOrbitalEpochError,
    TLEFormatError,
)

from .elements import ElementRecord

from ._types import (
    OrbitClass,
    PropagationBatch,
    PropagationResult,
    PropagationStatus,
    Resonance,
)

from ._bundle import CoefficientBundle, DeepSpaceBundle, NearEarthBundle
from ._initializer import initialize
from ._propagation import propagate, propagate_batch

from .tle import compute_checksum, parse_tle, parse_tle_lines, validate_tle_line
from .satellite import Satellite

__all__ = [
    # Configuration
    "set_dtype",
    "get_dtype",
    # Gravity models
    "EarthGravity",
    "WGS72OLD",
    "WGS72",
    "WGS84",
    "GRAVITY_MODELS",
    # Errors
    "SGP4Error",
    "DegenerateOrbitError",
    "DecayedOrbitError",
    "SubOrbitalEpochError",
    "TLEFormatError",
    "ConvergenceWarning",
    "ErrorCode",
    # Types
    "ElementRecord",
    "CoefficientBundle",
    "NearEarthBundle",
    "DeepSpaceBundle",
    "OrbitClass",
    "Resonance",
    "PropagationStatus",
    "PropagationResult",
    "PropagationBatch",
    # Propagation
    "initialize",
    "propagate",
    "propagate_batch",
    # TLE parsing
    "parse_tle",
    "parse_tle_lines",
    "compute_checksum",
    "validate_tle_line",
    "Satellite",
]

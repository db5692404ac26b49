"""
Earth gravity models and numerical constants for the SGP4/SDP4 propagator.

Provides three standard gravity models: WGS72OLD, WGS72 (standard), and WGS84,
plus the fixed tolerances and thresholds of the model. Values match the
reference ``sgp4`` Python library exactly; changing any of them shifts
results at the sub-kilometer level.
"""

from math import pi, sqrt
from typing import NamedTuple

# Mathematical Constants
"""
Two pi. Units: *rad*
"""
TWOPI = 2.0 * pi

"""
Constant to convert degrees to radians. Units: *rad/deg*
"""
DEG2RAD = pi / 180.0

"""
Constant to convert radians to degrees. Units: *deg/rad*
"""
RAD2DEG = 180.0 / pi

"""
Minutes per day. Units: *min/day*
"""
MINUTES_PER_DAY = 1440.0

"""
Conversion from rad/min to rev/day (1440 / 2pi). Units: *(rev/day)/(rad/min)*
"""
XPDOTP = MINUTES_PER_DAY / TWOPI

"""
Julian date of the SGP4 time origin, 1949 December 31 00:00 UT. Units: *days*
"""
JD_SGP4_EPOCH = 2433281.5


class EarthGravity(NamedTuple):
    """Earth gravity model constants for SGP4 propagation.

    Attributes:
        tumin: Time units per minute (1/xke).
        mu: Gravitational parameter [km^3/s^2].
        radiusearthkm: Earth equatorial radius [km].
        xke: Reciprocal of tumin (sqrt(GM) in SGP4 time units).
        j2: Second zonal harmonic.
        j3: Third zonal harmonic.
        j4: Fourth zonal harmonic.
        j3oj2: Ratio j3/j2.
    """

    tumin: float
    mu: float
    radiusearthkm: float
    xke: float
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _gravity_model(mu: float, radius: float, j2: float, j3: float, j4: float, xke: float | None = None) -> EarthGravity:
    if xke is None:
        xke = 60.0 / sqrt(radius**3 / mu)
    return EarthGravity(
        tumin=1.0 / xke,
        mu=mu,
        radiusearthkm=radius,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


WGS72OLD = _gravity_model(
    mu=398600.79964,
    radius=6378.135,
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
    xke=0.0743669161,
)
"""WGS 72 Old gravity model (legacy)."""

WGS72 = _gravity_model(
    mu=398600.8,
    radius=6378.135,
    j2=0.001082616,
    j3=-0.00000253881,
    j4=-0.00000165597,
)
"""WGS 72 gravity model (standard for SGP4)."""

WGS84 = _gravity_model(
    mu=398600.5,
    radius=6378.137,
    j2=0.00108262998905,
    j3=-0.00000253215306,
    j4=-0.00000161098761,
)
"""WGS 84 gravity model."""

GRAVITY_MODELS = {
    "wgs72old": WGS72OLD,
    "wgs72": WGS72,
    "wgs84": WGS84,
}
"""Mapping of gravity model names to ``EarthGravity`` instances."""


def resolve_gravity(gravity: str | EarthGravity) -> EarthGravity:
    """Return the ``EarthGravity`` for a model name or pass an instance through.

    Args:
        gravity: Gravity model name (``'wgs72'``, ``'wgs84'``, ``'wgs72old'``)
            or an ``EarthGravity`` instance.

    Returns:
        The gravity model constants.

    Raises:
        KeyError: If the model name is unknown.
    """
    if isinstance(gravity, str):
        return GRAVITY_MODELS[gravity.lower()]
    return gravity


# Model thresholds

"""
Orbital period at or above which the deep-space (SDP4) branch is selected. Units: *min*
"""
DEEP_SPACE_PERIOD = 225.0

"""
Perigee altitude below which the higher-order drag terms are dropped. Units: *km*
"""
SIMPLIFIED_DRAG_PERIGEE = 220.0

"""
Altitude parameters of the atmospheric density function: base of the
``s`` parameter, upper boundary of ``q0``, and the perigee altitudes at
which ``s`` is lowered and floored. Units: *km*
"""
DENSITY_S_ALTITUDE = 78.0
DENSITY_Q0_ALTITUDE = 120.0
LOW_PERIGEE_ALTITUDE = 156.0
VERY_LOW_PERIGEE_ALTITUDE = 98.0
VERY_LOW_PERIGEE_S = 20.0

# Numerical tolerances

"""
Kepler iteration stops once the Newton correction falls below this. Units: *rad*
"""
KEPLER_TOLERANCE = 1.0e-12

"""
Maximum number of Newton iterations on Kepler's equation.
"""
KEPLER_MAX_ITERATIONS = 10

"""
Largest Newton correction applied in a single Kepler iteration. Units: *rad*
"""
KEPLER_MAX_STEP = 0.95

"""
Bounds the mean eccentricity is clamped into after the range check.
"""
ECC_MIN = 1.0e-6
ECC_MAX = 1.0 - 1.0e-6

"""
Lower bound of the mean eccentricity range check; anything below fails.
"""
ECC_FLOOR = -0.001

"""
Eccentricity below which the J3 eccentricity-dependent drag terms vanish.
"""
ECC_DRAG_THRESHOLD = 1.0e-4

"""
Replacement divisor for ``1 + cos(i)`` at inclinations of 180 degrees.
"""
COSIO_SINGULAR_DIVISOR = 1.5e-12

"""
Inclination below which lunar-solar periodics use the Lyddane modification. Units: *rad*
"""
LYDDANE_INCLINATION = 0.2

"""
Resonance integrator step. Units: *min*
"""
RESONANCE_STEP = 720.0

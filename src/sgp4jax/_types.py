"""
Data types for the SGP4/SDP4 propagator.

The coefficient containers are :class:`~typing.NamedTuple` instances of
Python floats. They are immutable, safe to share between threads, and JAX
treats them as pytrees, so they pass straight into ``jax.jit`` compiled
kernels as traced arguments.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from jax import Array


class OrbitClass(Enum):
    """Model branch selected at initialization."""

    NEAR_EARTH = "n"
    DEEP_SPACE = "d"


class Resonance(Enum):
    """Deep-space resonance condition detected at initialization."""

    NONE = 0
    SYNCHRONOUS = 1
    HALF_DAY = 2


class PropagationStatus(Enum):
    """Outcome of a successful propagation."""

    NOMINAL = "nominal"
    LOW_PRECISION = "low_precision"


class SecularCoefficients(NamedTuple):
    """Epoch elements and secular/drag coefficients shared by both branches.

    Attributes:
        ecco: Eccentricity at epoch.
        inclo: Inclination at epoch [rad].
        nodeo: RAAN at epoch [rad].
        argpo: Argument of perigee at epoch [rad].
        mo: Mean anomaly at epoch [rad].
        bstar: B* drag coefficient [1/earth_radii].
        no_unkozai: Brouwer mean motion [rad/min].
        gsto: Greenwich sidereal time at epoch [rad].
        con41: ``3 cos^2(i) - 1``.
        x1mth2: ``1 - cos^2(i)``.
        x7thm1: ``7 cos^2(i) - 1``.
        mdot: Secular rate of mean anomaly [rad/min].
        argpdot: Secular rate of argument of perigee [rad/min].
        nodedot: Secular rate of RAAN [rad/min].
        nodecf: Quadratic drag coefficient of the node.
        cc1: C1 drag coefficient.
        cc4: C4 drag coefficient.
        cc5: C5 drag coefficient.
        d2: D2 drag coefficient.
        d3: D3 drag coefficient.
        d4: D4 drag coefficient.
        t2cof: Mean longitude t^2 drag coefficient.
        t3cof: Mean longitude t^3 drag coefficient.
        t4cof: Mean longitude t^4 drag coefficient.
        t5cof: Mean longitude t^5 drag coefficient.
        delmo: ``(1 + eta cos(M0))^3``.
        eta: ``a0 e0 / (a0 - s)``.
        omgcof: Perigee drag coefficient.
        sinmao: ``sin(M0)``.
        xmcof: Mean anomaly drag coefficient.
        xlcof: J3 long-period mean longitude coefficient.
        aycof: J3 long-period ``ay`` coefficient.
    """

    ecco: float
    inclo: float
    nodeo: float
    argpo: float
    mo: float
    bstar: float
    no_unkozai: float
    gsto: float
    con41: float
    x1mth2: float
    x7thm1: float
    mdot: float
    argpdot: float
    nodedot: float
    nodecf: float
    cc1: float
    cc4: float
    cc5: float
    d2: float
    d3: float
    d4: float
    t2cof: float
    t3cof: float
    t4cof: float
    t5cof: float
    delmo: float
    eta: float
    omgcof: float
    sinmao: float
    xmcof: float
    xlcof: float
    aycof: float


class LunarSolarTerms(NamedTuple):
    """Solar and lunar perturbation terms fixed at the element epoch.

    The ``s*`` fields are solar amplitudes, the ``x*`` and ``e*`` fields
    lunar amplitudes of the periodic corrections; ``zmos`` and ``zmol`` are
    the solar and lunar mean anomalies at epoch. The ``d*dt`` fields are the
    secular lunar-solar rates of the mean elements.
    """

    e3: float
    ee2: float
    se2: float
    se3: float
    sgh2: float
    sgh3: float
    sgh4: float
    sh2: float
    sh3: float
    si2: float
    si3: float
    sl2: float
    sl3: float
    sl4: float
    xgh2: float
    xgh3: float
    xgh4: float
    xh2: float
    xh3: float
    xi2: float
    xi3: float
    xl2: float
    xl3: float
    xl4: float
    zmol: float
    zmos: float
    dedt: float
    didt: float
    dmdt: float
    dnodt: float
    domdt: float


class ResonanceTerms(NamedTuple):
    """Coefficients of the geopotential resonance integration.

    ``del1``-``del3`` drive the synchronous (24 h) resonance, ``d2201``-``d5433``
    the half-day (12 h) resonance. ``xlamo`` is the resonance phase at epoch
    and ``xfact`` its secular drift. All are zero for non-resonant orbits.
    """

    d2201: float = 0.0
    d2211: float = 0.0
    d3210: float = 0.0
    d3222: float = 0.0
    d4410: float = 0.0
    d4422: float = 0.0
    d5220: float = 0.0
    d5232: float = 0.0
    d5421: float = 0.0
    d5433: float = 0.0
    del1: float = 0.0
    del2: float = 0.0
    del3: float = 0.0
    xfact: float = 0.0
    xlamo: float = 0.0


class MeanElements(NamedTuple):
    """Mean elements at the requested time.

    Attributes:
        am: Semi-major axis [earth_radii].
        em: Eccentricity.
        inclm: Inclination [rad].
        nodem: RAAN [rad].
        argpm: Argument of perigee [rad].
        mm: Mean anomaly [rad].
        nm: Mean motion [rad/min].
    """

    am: Array
    em: Array
    inclm: Array
    nodem: Array
    argpm: Array
    mm: Array
    nm: Array


class KernelOutput(NamedTuple):
    """Raw output of a compiled propagation kernel.

    Attributes:
        position: TEME position [km], NaN when ``error_code`` is non-zero.
        velocity: TEME velocity [km/s], NaN when ``error_code`` is non-zero.
        error_code: :class:`~sgp4jax.errors.ErrorCode` value.
        converged: Whether the Kepler iteration met its tolerance.
        radius: Geocentric radius [km] before masking.
        eccentricity: Mean eccentricity after drag, before clamping.
        mean_motion: Mean motion after drag [rad/min].
    """

    position: Array
    velocity: Array
    error_code: Array
    converged: Array
    radius: Array
    eccentricity: Array
    mean_motion: Array


class PropagationResult(NamedTuple):
    """State of one object at one time, in the TEME frame.

    Attributes:
        position: Position ``[x, y, z]`` [km].
        velocity: Velocity ``[vx, vy, vz]`` [km/s].
        status: :attr:`PropagationStatus.LOW_PRECISION` if Kepler's equation
            did not converge within the iteration cap.
        tsince: Time since epoch [min].
        satnum: Catalog identifier of the object.
    """

    position: Array
    velocity: Array
    status: PropagationStatus
    tsince: float
    satnum: str


class PropagationBatch(NamedTuple):
    """States of one object at many times, in the TEME frame.

    Attributes:
        position: Positions, shape ``(N, 3)`` [km]. NaN rows failed.
        velocity: Velocities, shape ``(N, 3)`` [km/s]. NaN rows failed.
        error_code: :class:`~sgp4jax.errors.ErrorCode` values, shape ``(N,)``.
        converged: Kepler convergence flags, shape ``(N,)``.
    """

    position: Array
    velocity: Array
    error_code: Array
    converged: Array

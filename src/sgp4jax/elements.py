"""
Element records consumed by the SGP4/SDP4 initializer.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import pi

from sgp4jax.constants import JD_SGP4_EPOCH, MINUTES_PER_DAY, XPDOTP
from sgp4jax.errors import DegenerateOrbitError


@dataclass(frozen=True)
class ElementRecord:
    """Mean orbital elements of one object at its epoch.

    This is a plain Python dataclass holding already-parsed elements, as
    produced by :func:`~sgp4jax.tle.parse_tle` or any other element source.
    Angles are in radians, mean motion in revolutions per day. The epoch is
    a Julian date split into a whole and a fractional part, which are summed
    when the epoch is needed.

    Construction checks the invariants the propagator relies on and raises
    :class:`~sgp4jax.errors.DegenerateOrbitError` if they do not hold.

    Attributes:
        satnum: Satellite catalog number as a string (e.g. ``'25544'``).
        epoch_jd: Julian date of epoch (whole part).
        epoch_jd_fraction: Julian date of epoch (fractional part).
        mean_motion: Kozai mean motion [rev/day].
        eccentricity: Eccentricity [dimensionless], ``0 <= e < 1``.
        inclination: Inclination [rad], ``0 <= i <= pi``.
        raan: Right ascension of the ascending node [rad].
        argp: Argument of perigee [rad].
        mean_anomaly: Mean anomaly [rad].
        mean_motion_dot: First time derivative of mean motion [rev/day^2].
        mean_motion_ddot: Second time derivative of mean motion [rev/day^3].
        bstar: B* drag coefficient [1/earth_radii].
        name: Object name (title line of a three-line element set).
        classification: Classification character (``'U'``, ``'C'``, or ``'S'``).
        international_designator: International designator (e.g. ``'98067A'``).
        element_number: Element set number.
        revolution_number: Revolution number at epoch.
    """

    satnum: str
    epoch_jd: float
    epoch_jd_fraction: float
    mean_motion: float
    eccentricity: float
    inclination: float
    raan: float
    argp: float
    mean_anomaly: float
    mean_motion_dot: float = 0.0
    mean_motion_ddot: float = 0.0
    bstar: float = 0.0
    name: str = ""
    classification: str = "U"
    international_designator: str = ""
    element_number: int = 0
    revolution_number: int = 0

    def __post_init__(self) -> None:
        if not self.mean_motion > 0.0:
            raise DegenerateOrbitError(
                "mean motion must be strictly positive",
                satnum=self.satnum,
                mean_motion=self.mean_motion,
            )
        if not 0.0 <= self.eccentricity < 1.0:
            raise DegenerateOrbitError(
                "eccentricity must lie in [0, 1)",
                satnum=self.satnum,
                eccentricity=self.eccentricity,
            )
        if not 0.0 <= self.inclination <= pi:
            raise DegenerateOrbitError(
                "inclination must lie in [0, pi]",
                satnum=self.satnum,
                inclination=self.inclination,
            )

    @property
    def no_kozai(self) -> float:
        """Kozai mean motion [rad/min]."""
        return self.mean_motion / XPDOTP

    @property
    def epoch(self) -> float:
        """Epoch in days since 1949 December 31 00:00 UT."""
        return self.epoch_jd + self.epoch_jd_fraction - JD_SGP4_EPOCH

    @property
    def period(self) -> float:
        """Kozai orbital period [min]."""
        return MINUTES_PER_DAY / self.mean_motion

"""High-level satellite class for SGP4/SDP4 propagation.

Provides :class:`Satellite`, a convenience wrapper that combines TLE
parsing, initialization and propagation into a single object with
user-friendly properties and methods.
"""

from __future__ import annotations

from datetime import datetime, timedelta

import jax.numpy as jnp
import numpy as np
from jax import Array
from jax.typing import ArrayLike

from sgp4jax._bundle import CoefficientBundle
from sgp4jax._initializer import initialize
from sgp4jax._propagation import propagate, propagate_batch
from sgp4jax._types import OrbitClass, PropagationBatch, PropagationResult, Resonance
from sgp4jax.constants import RAD2DEG, EarthGravity
from sgp4jax.elements import ElementRecord
from sgp4jax.tle import parse_tle

_SGP4_EPOCH0 = datetime(1949, 12, 31)


class Satellite:
    """An initialized object with SGP4/SDP4 propagation.

    Wraps an element record and its coefficient bundle. Provides orbital
    element properties in user-friendly units and state vector methods.

    The ``propagate`` methods return raw SGP4 output in km and km/s. The
    ``state_teme`` method returns SI units (m, m/s).

    Examples:
        ```python
        from sgp4jax import Satellite

        line1 = "1 25544U 98067A   08264.51782528 ..."
        line2 = "2 25544  51.6416 247.4627 ..."
        sat = Satellite.from_tle(line1, line2)

        sat.n             # mean motion [rev/day]
        sat.i             # inclination [deg]
        sat.orbit_class   # OrbitClass.NEAR_EARTH

        # Raw SGP4 output (km, km/s) 60 minutes after epoch
        result = sat.propagate(60.0)

        # State in TEME (m, m/s) at epoch + 3600 seconds
        x_teme = sat.state_teme(3600.0)
        ```

    Args:
        elements: Mean elements of the object.
        gravity: Gravity model name or :class:`EarthGravity` instance.
        opsmode: ``'i'`` (improved) or ``'a'`` (AFSPC compatible).

    Raises:
        DegenerateOrbitError: If the elements cannot be initialized.
    """

    def __init__(
        self,
        elements: ElementRecord,
        gravity: str | EarthGravity = "wgs72",
        opsmode: str = "i",
    ) -> None:
        self._elements = elements
        self._bundle = initialize(elements, gravity, opsmode)

    @classmethod
    def from_tle(
        cls,
        line1: str,
        line2: str,
        name: str = "",
        gravity: str | EarthGravity = "wgs72",
        opsmode: str = "i",
    ) -> Satellite:
        """Parse a two-line element set and initialize it.

        Raises:
            TLEFormatError: If the lines are malformed.
            DegenerateOrbitError: If the elements cannot be initialized.
        """
        return cls(parse_tle(line1, line2, name=name), gravity=gravity, opsmode=opsmode)

    # ------------------------------------------------------------------
    # Properties (user-friendly units)
    # ------------------------------------------------------------------

    @property
    def elements(self) -> ElementRecord:
        """The element record the satellite was initialized from."""
        return self._elements

    @property
    def bundle(self) -> CoefficientBundle:
        """The coefficient bundle (for use with :func:`~sgp4jax.propagate`)."""
        return self._bundle

    @property
    def satnum(self) -> str:
        """Catalog number (string, e.g. ``'25544'``)."""
        return self._elements.satnum

    @property
    def name(self) -> str:
        """Object name, empty if the element set had no title line."""
        return self._elements.name

    @property
    def epoch(self) -> datetime:
        """Element epoch (UTC, naive)."""
        return _SGP4_EPOCH0 + timedelta(days=self._elements.epoch)

    @property
    def n(self) -> float:
        """Mean motion [rev/day]."""
        return self._elements.mean_motion

    @property
    def e(self) -> float:
        """Eccentricity [dimensionless]."""
        return self._elements.eccentricity

    @property
    def i(self) -> float:
        """Inclination [degrees]."""
        return self._elements.inclination * RAD2DEG

    @property
    def raan(self) -> float:
        """Right ascension of ascending node [degrees]."""
        return self._elements.raan * RAD2DEG

    @property
    def argp(self) -> float:
        """Argument of perigee [degrees]."""
        return self._elements.argp * RAD2DEG

    @property
    def M(self) -> float:
        """Mean anomaly [degrees]."""
        return self._elements.mean_anomaly * RAD2DEG

    @property
    def bstar(self) -> float:
        """B* drag coefficient [1/earth_radii]."""
        return self._elements.bstar

    @property
    def orbit_class(self) -> OrbitClass:
        """Model branch: near-Earth (SGP4) or deep-space (SDP4)."""
        return self._bundle.orbit_class

    @property
    def resonance(self) -> Resonance:
        """Resonance condition (always ``NONE`` for near-Earth objects)."""
        return getattr(self._bundle, "resonance_kind", Resonance.NONE)

    # ------------------------------------------------------------------
    # Raw SGP4 output (km, km/s)
    # ------------------------------------------------------------------

    def propagate(self, tsince_min: float) -> PropagationResult:
        """Propagate to one time.

        Args:
            tsince_min: Time since epoch in **minutes**.

        Returns:
            TEME position [km] and velocity [km/s] with status.

        Raises:
            DecayedOrbitError: If the orbit has decayed at that time.
        """
        return propagate(self._bundle, tsince_min)

    def propagate_batch(self, tsince_min: ArrayLike) -> PropagationBatch:
        """Propagate to many times without raising.

        Args:
            tsince_min: Times since epoch in **minutes**, shape ``(N,)``.

        Returns:
            Positions, velocities, error codes and convergence flags.
        """
        return propagate_batch(self._bundle, tsince_min)

    # ------------------------------------------------------------------
    # State methods (SI: m, m/s)
    # ------------------------------------------------------------------

    def state_teme(self, t: float | ArrayLike) -> Array:
        """Compute state in the TEME frame.

        Args:
            t: Seconds since epoch, scalar or shape ``(N,)``.

        Returns:
            TEME state ``[x, y, z, vx, vy, vz]`` in m and m/s, shape ``(6,)``
            for a scalar time or ``(N, 6)`` for an array. Rows of an array
            call hold NaN where propagation failed.

        Raises:
            DecayedOrbitError: For a scalar time at which the orbit has
                decayed.
        """
        t = np.asarray(t, dtype=float)
        if t.ndim == 0:
            result = propagate(self._bundle, float(t) / 60.0)
            return jnp.concatenate([result.position * 1e3, result.velocity * 1e3])
        batch = propagate_batch(self._bundle, t / 60.0)
        return jnp.concatenate([batch.position * 1e3, batch.velocity * 1e3], axis=-1)

    # ------------------------------------------------------------------
    # Representation
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"Satellite(satnum={self.satnum!r}, epoch={self.epoch.isoformat()}, "
            f"n={self.n:.8f} rev/day, orbit_class={self.orbit_class.name})"
        )

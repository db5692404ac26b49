"""
Exceptions and warnings raised by the SGP4/SDP4 propagator.

The compiled propagation kernels cannot raise, so they report an
:class:`ErrorCode` alongside their output. The Python-level entry points
translate non-zero codes into the exceptions defined here. Codes keep the
numbering of the reference ``sgp4`` library so results can be compared
directly with ``Satrec.error``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Outcome of a single propagation, numbered as in the reference library."""

    NONE = 0
    MEAN_ECCENTRICITY = 1
    MEAN_MOTION = 2
    PERTURBED_ECCENTRICITY = 3
    SEMI_LATUS_RECTUM = 4
    SUB_ORBITAL = 5
    DECAYED = 6

    @property
    def message(self) -> str:
        """Human-readable description of the condition."""
        return _MESSAGES[self]


_MESSAGES = {
    ErrorCode.NONE: "success",
    ErrorCode.MEAN_ECCENTRICITY: "mean eccentricity is outside the range 0 <= e < 1",
    ErrorCode.MEAN_MOTION: "mean motion has fallen below zero",
    ErrorCode.PERTURBED_ECCENTRICITY: "perturbed eccentricity is outside the range 0 <= e <= 1",
    ErrorCode.SEMI_LATUS_RECTUM: "semi-latus rectum has fallen below zero",
    ErrorCode.SUB_ORBITAL: "epoch elements are sub-orbital",
    ErrorCode.DECAYED: "satellite has decayed below the Earth's surface",
}


class SGP4Error(Exception):
    """Base class for propagation failures.

    Every failure carries the catalog number, the requested time (if any),
    and the computed quantities that triggered it, so the condition can be
    reproduced deterministically.

    Attributes:
        satnum: Catalog identifier of the object.
        tsince: Requested time since epoch [min], or ``None`` at initialization.
        context: Diagnostic values (radius, eccentricity, ...) at failure.
    """

    def __init__(
        self,
        message: str,
        *,
        satnum: str | None = None,
        tsince: float | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.satnum = satnum
        self.tsince = tsince
        self.context = context

    def __str__(self) -> str:
        parts = [self.message]
        if self.satnum is not None:
            parts.append(f"satnum={self.satnum.strip()!r}")
        if self.tsince is not None:
            parts.append(f"tsince={self.tsince!r} min")
        parts.extend(f"{k}={v!r}" for k, v in self.context.items())
        return "; ".join(parts)


class DegenerateOrbitError(SGP4Error, ValueError):
    """The element set describes geometry the model cannot initialize.

    Raised by :func:`~sgp4jax.initialize` (and by
    :class:`~sgp4jax.ElementRecord` construction). The object cannot be
    propagated at any time.
    """


class DecayedOrbitError(SGP4Error):
    """The orbit has decayed at the requested time.

    Propagation at this time is refused, but the bundle stays valid for
    other (typically earlier) times.

    Attributes:
        code: The :class:`ErrorCode` reported by the propagation kernel.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.DECAYED,
        satnum: str | None = None,
        tsince: float | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, satnum=satnum, tsince=tsince, **context)
        self.code = ErrorCode(code)


class SubOrbitalEpochError(DegenerateOrbitError, DecayedOrbitError):
    """Perigee at epoch is already below the Earth's surface.

    The object has decayed before its own epoch, so initialization fails.
    Catchable as either :class:`DegenerateOrbitError` or
    :class:`DecayedOrbitError`.
    """

    def __init__(self, message: str, *, satnum: str | None = None, **context: Any) -> None:
        super().__init__(message, code=ErrorCode.SUB_ORBITAL, satnum=satnum, **context)


class TLEFormatError(ValueError):
    """A two-line element set failed format or checksum validation."""


class ConvergenceWarning(RuntimeWarning):
    """Kepler's equation did not converge within the iteration cap.

    The best available eccentric anomaly is used and the result is flagged
    as low precision.
    """

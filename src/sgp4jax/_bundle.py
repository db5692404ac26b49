"""
Derived coefficient bundles.

A bundle is the immutable result of initializing one element set. Its
concrete type records which model branch applies, and it carries the
compiled kernel of that branch, so no per-call dispatch on the orbit class
is needed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from jax import Array

from sgp4jax._propagation import (
    deep_space_batch_kernel,
    deep_space_kernel,
    near_earth_batch_kernel,
    near_earth_kernel,
)
from sgp4jax._types import (
    KernelOutput,
    LunarSolarTerms,
    OrbitClass,
    Resonance,
    ResonanceTerms,
    SecularCoefficients,
)
from sgp4jax.constants import EarthGravity
from sgp4jax.elements import ElementRecord


@dataclass(frozen=True)
class CoefficientBundle(ABC):
    """Common part of the near-Earth and deep-space bundles.

    Attributes:
        elements: Element record the bundle was initialized from.
        gravity: Earth gravity model constants.
        opsmode: Operation mode, ``'i'`` or ``'a'``.
        coefficients: Secular rates and drag coefficients.
    """

    elements: ElementRecord
    gravity: EarthGravity
    opsmode: str
    coefficients: SecularCoefficients

    orbit_class = None

    @abstractmethod
    def evaluate(self, tsince: Array) -> KernelOutput:
        """Run the compiled kernel at one time since epoch [min]."""

    @abstractmethod
    def evaluate_batch(self, tsince: Array) -> KernelOutput:
        """Run the compiled kernel over a 1-D array of times since epoch [min]."""


@dataclass(frozen=True)
class NearEarthBundle(CoefficientBundle):
    """Bundle of an orbit with a period below 225 minutes (SGP4).

    Attributes:
        simplified: ``True`` if perigee is below 220 km, in which case the
            higher-order drag terms are not applied.
    """

    simplified: bool = False

    orbit_class = OrbitClass.NEAR_EARTH

    def evaluate(self, tsince: Array) -> KernelOutput:
        return near_earth_kernel(self.coefficients, tsince, gravity=self.gravity, simplified=self.simplified)

    def evaluate_batch(self, tsince: Array) -> KernelOutput:
        return near_earth_batch_kernel(self.coefficients, tsince, gravity=self.gravity, simplified=self.simplified)


@dataclass(frozen=True)
class DeepSpaceBundle(CoefficientBundle):
    """Bundle of an orbit with a period of 225 minutes or more (SDP4).

    Attributes:
        lunar_solar: Solar and lunar perturbation terms at epoch.
        resonance: Resonance integration coefficients.
        resonance_kind: Detected resonance condition.
    """

    lunar_solar: LunarSolarTerms | None = None
    resonance: ResonanceTerms = ResonanceTerms()
    resonance_kind: Resonance = Resonance.NONE

    orbit_class = OrbitClass.DEEP_SPACE

    def evaluate(self, tsince: Array) -> KernelOutput:
        return deep_space_kernel(
            self.coefficients,
            self.lunar_solar,
            self.resonance,
            tsince,
            gravity=self.gravity,
            opsmode=self.opsmode,
            kind=self.resonance_kind,
        )

    def evaluate_batch(self, tsince: Array) -> KernelOutput:
        return deep_space_batch_kernel(
            self.coefficients,
            self.lunar_solar,
            self.resonance,
            tsince,
            gravity=self.gravity,
            opsmode=self.opsmode,
            kind=self.resonance_kind,
        )

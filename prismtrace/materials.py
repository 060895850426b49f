"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction)

A material decides, one bounce at a time, whether an incoming ray is
absorbed or scattered and how much of each channel survives the bounce.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import math

import numpy as np

from .vec3 import Vec3, Color, default_rng
from .ray import Ray
from .shapes import HitRecord


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    scattered_ray: Ray
    attenuation: Color


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(
        self,
        ray_in: Ray,
        hit: HitRecord,
        rng: Optional[np.random.Generator] = None
    ) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation.

        Args:
            ray_in: The incoming ray
            hit: The intersection being shaded
            rng: Random source for the bounce (module default if None)

        Returns:
            ScatterResult if ray scatters, None if absorbed
        """
        pass


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        self.albedo = albedo

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        scatter_direction = hit.normal + Vec3.random_unit_vector(rng)

        # Catch degenerate scatter direction
        if scatter_direction.near_zero():
            scatter_direction = hit.normal

        return ScatterResult(
            scattered_ray=Ray(hit.point, scatter_direction),
            attenuation=self.albedo
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with specular reflection."""

    def __init__(self, albedo: Color, fuzz: float = 0.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            fuzz: Surface roughness (0 = mirror, 1 = very rough), clamped to [0, 1]
        """
        self.albedo = albedo
        self.fuzz = max(0.0, min(fuzz, 1.0))

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        reflected = ray_in.direction.unit_vector().reflect(hit.normal)

        if self.fuzz > 0:
            reflected = reflected + Vec3.random_in_unit_sphere(rng) * self.fuzz

        # Fuzz can push the reflection below the surface; that ray is absorbed
        if reflected.dot(hit.normal) > 0:
            return ScatterResult(
                scattered_ray=Ray(hit.point, reflected),
                attenuation=self.albedo
            )
        return None

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, fuzz={self.fuzz})"


class Dielectric(Material):
    """Clear dielectric (glass-like) material with refraction."""

    def __init__(self, refraction_index: float = 1.5):
        """Create a dielectric material.

        Args:
            refraction_index: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        self.refraction_index = refraction_index

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        attenuation = Color(1.0, 1.0, 1.0)

        # Matched indices: no interface, the ray continues unchanged
        if self.refraction_index == 1.0:
            return ScatterResult(
                scattered_ray=Ray(hit.point, ray_in.direction),
                attenuation=attenuation
            )

        # Determine refraction ratio based on whether we're entering or exiting
        refraction_ratio = 1.0 / self.refraction_index if hit.front_face else self.refraction_index

        unit_direction = ray_in.direction.unit_vector()
        cos_theta = min(-unit_direction.dot(hit.normal), 1.0)
        sin_theta = math.sqrt(1.0 - cos_theta * cos_theta)

        cannot_refract = refraction_ratio * sin_theta > 1.0

        if cannot_refract or reflectance(cos_theta, self.refraction_index) > default_rng(rng).random():
            direction = unit_direction.reflect(hit.normal)
        else:
            direction = unit_direction.refract(hit.normal, refraction_ratio)

        return ScatterResult(
            scattered_ray=Ray(hit.point, direction),
            attenuation=attenuation
        )

    def __repr__(self) -> str:
        return f"Dielectric(refraction_index={self.refraction_index})"


def reflectance(cosine: float, refraction_index: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1 - refraction_index) / (1 + refraction_index)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)

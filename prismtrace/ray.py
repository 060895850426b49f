"""
Rays: the half-lines the tracer follows from the lens into the scene.

Camera rays are not normalised; their direction reaches the focus plane at
t = 1. Scattered rays keep whatever length the material produced, so t is a
ray parameter, not a distance.
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """Origin plus direction, evaluated as origin + t * direction."""

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3):
        self.origin = origin
        self.direction = direction

    def at(self, t: float) -> Point3:
        """Point reached after travelling ``t`` direction-lengths from the origin."""
        return self.origin + self.direction * t

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"

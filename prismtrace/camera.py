"""
Camera module for generating primary rays.

Supports:
- Perspective projection
- Depth of field (thin lens defocus blur)
- Configurable field of view
- Arbitrary positioning via look-at
"""

from __future__ import annotations
import math
from typing import Optional

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A thin-lens camera with perspective projection and depth of field.

    The basis is derived once at construction; the camera is immutable
    afterwards, so it can be shared freely between render threads.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 20.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: Optional[float] = None
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0)), must not be parallel
                to the viewing direction
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens diameter for depth of field (0 = pinhole)
            focus_dist: Distance to the focus plane (default: |look_from - look_at|)
        """
        if focus_dist is None:
            focus_dist = (look_from - look_at).length()

        theta = math.radians(vfov)
        h = math.tan(theta / 2)
        viewport_height = 2.0 * h
        viewport_width = aspect_ratio * viewport_height

        # Compute orthonormal camera basis
        self.w = (look_from - look_at).unit_vector()  # Points backward from camera
        self.u = vup.cross(self.w).unit_vector()       # Points right
        self.v = self.w.cross(self.u)                  # Points up

        self.origin = look_from
        self.horizontal = self.u * viewport_width * focus_dist
        self.vertical = self.v * viewport_height * focus_dist
        self.lower_left_corner = (
            self.origin
            - self.horizontal / 2
            - self.vertical / 2
            - self.w * focus_dist
        )

        self.lens_radius = aperture / 2
        self.focus_dist = focus_dist

    def get_ray(self, s: float, t: float, rng: Optional[np.random.Generator] = None) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        The ray starts at a random point on the lens and passes through the
        point (s, t) of the focus plane, so ``ray.at(1)`` lies on that plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random source for the lens sample

        Returns:
            A ray from the camera lens through the specified point
        """
        if self.lens_radius > 0:
            rd = Vec3.random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )

        return Ray(self.origin + offset, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"


class CameraBuilder:
    """Collects camera parameters with sensible defaults.

    Only the eye and target points are required; every other parameter can
    be overridden through the chainable setters before calling build().
    """

    def __init__(self, look_from: Point3, look_at: Point3):
        self.look_from = look_from
        self.look_at = look_at
        self.vup = Vec3(0, 1, 0)
        self.vfov = 20.0
        self.aspect_ratio = 16.0 / 9.0
        self.aperture = 0.5
        self.focus_dist = (look_from - look_at).length()

    def set_up_vector(self, vup: Vec3) -> CameraBuilder:
        self.vup = vup
        return self

    def set_vfov(self, vfov: float) -> CameraBuilder:
        self.vfov = vfov
        return self

    def set_aspect_ratio(self, aspect_ratio: float) -> CameraBuilder:
        self.aspect_ratio = aspect_ratio
        return self

    def set_aperture(self, aperture: float) -> CameraBuilder:
        self.aperture = aperture
        return self

    def set_focus_distance(self, focus_dist: float) -> CameraBuilder:
        self.focus_dist = focus_dist
        return self

    def build(self) -> Camera:
        """Create the camera from the collected parameters."""
        return Camera(
            look_from=self.look_from,
            look_at=self.look_at,
            vup=self.vup,
            vfov=self.vfov,
            aspect_ratio=self.aspect_ratio,
            aperture=self.aperture,
            focus_dist=self.focus_dist
        )

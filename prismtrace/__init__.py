"""
prismtrace - A Python Ray Tracing Renderer

A small path tracer in the "ray tracing in a weekend" tradition:
- Spheres with Lambertian, metal and dielectric materials
- Thin-lens camera with depth of field
- Recursive scattering integrator with a sky gradient background
- Multi-threaded tile rendering with reproducible seeding
- Plain-text PPM (P3) output
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, HittableList, HitRecord, Hittable
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric, reflectance
from .camera import Camera, CameraBuilder
from .renderer import Renderer, RenderSettings, trace, background_color, SHADOW_EPSILON
from .color import color_to_rgb8, write_color, to_ldr
from .ppm import PPMWriter, write_ppm, save_image
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene

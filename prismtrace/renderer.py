"""
Renderer module - the heart of the ray tracer.

Implements:
- The color integrator (bounce loop with a hard depth limit)
- Sky gradient background
- Multi-threaded tile-based pixel driver with per-tile random sources
- LDR conversion and image output
"""

from __future__ import annotations
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .color import to_ldr
from . import ppm

# Lower bound on hit distance, keeps scattered rays off their own surface
SHADOW_EPSILON = 1e-4

SKY_WHITE = Color(1.0, 1.0, 1.0)
SKY_BLUE = Color(0.5, 0.7, 1.0)

Tile = Tuple[int, int, int, int]


def background_color(ray: Ray) -> Color:
    """Vertical white-to-blue gradient based on the ray's direction."""
    unit_direction = ray.direction.unit_vector()
    t = 0.5 * (unit_direction.y + 1.0)
    return SKY_WHITE * (1.0 - t) + SKY_BLUE * t


def trace(ray: Ray, scene: Hittable, depth: int,
          rng: Optional[np.random.Generator] = None) -> Color:
    """Compute the color carried back along a ray.

    Follows the ray through at most ``depth`` scattering events, multiplying
    the attenuations along the way. A ray that escapes picks up the sky
    color; one that is absorbed or runs out of bounces contributes black.

    Args:
        ray: The ray to trace
        scene: The scene to trace against
        depth: Maximum number of bounces
        rng: Random source for scattering

    Returns:
        The computed color for this ray
    """
    throughput = Color(1.0, 1.0, 1.0)

    for _ in range(depth):
        hit = scene.hit(ray, SHADOW_EPSILON, float('inf'))

        if hit is None:
            return throughput * background_color(ray)

        scatter_result = hit.material.scatter(ray, hit, rng)
        if scatter_result is None:
            return Color(0, 0, 0)

        throughput = throughput * scatter_result.attenuation
        ray = scatter_result.scattered_ray

    return Color(0, 0, 0)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 400
    height: int = 225
    samples_per_pixel: int = 100
    max_depth: int = 50
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None

    def __post_init__(self):
        if self.width < 2 or self.height < 2:
            raise ValueError(f"Image must be at least 2x2 pixels, got {self.width}x{self.height}")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {self.max_depth}")
        if self.tile_size < 1:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.num_threads < 0:
            raise ValueError(f"num_threads must not be negative, got {self.num_threads}")
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


class Renderer:
    """Path tracing renderer with multi-threading support."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the averaged linear image.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            Image as numpy array of shape (height, width, 3), row 0 at the top
        """
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth
        scale = 1.0 / samples

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        total_tiles = len(tiles)
        completed_tiles = [0]  # Use list for mutable in closure
        progress_lock = threading.Lock()

        def render_tile(indexed_tile: Tuple[np.random.SeedSequence, Tile]) -> Tuple[Tile, np.ndarray]:
            """Render a single tile with its own random source."""
            seed, tile = indexed_tile
            x0, y0, x1, y1 = tile
            rng = np.random.default_rng(seed)
            tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

            for j in range(y1 - y0):
                # Camera t runs bottom to top, image rows run top to bottom
                row = height - 1 - (y0 + j)
                for i in range(x1 - x0):
                    pixel_color = Color(0, 0, 0)

                    for _ in range(samples):
                        u = (x0 + i + rng.random()) / (width - 1)
                        v = (row + rng.random()) / (height - 1)

                        ray = camera.get_ray(u, v, rng)
                        pixel_color = pixel_color + trace(ray, scene, max_depth, rng)

                    tile_image[j, i] = pixel_color.to_array() * scale

            with progress_lock:
                completed_tiles[0] += 1
                if self._progress_callback:
                    self._progress_callback(completed_tiles[0] / total_tiles)

            return tile, tile_image

        indexed_tiles = list(zip(self._tile_seeds(total_tiles), tiles))
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, indexed_tiles))
        else:
            results = [render_tile(tile) for tile in indexed_tiles]

        # Combine tiles into final image
        for tile, tile_image in results:
            x0, y0, x1, y1 = tile
            image[y0:y1, x0:x1] = tile_image

        return image

    def _tile_seeds(self, count: int) -> list[np.random.SeedSequence]:
        """One independent seed per tile, reproducible when a seed is configured.

        Seeds are tied to tile indices, not to threads, so the image does not
        depend on how many workers render it.
        """
        return np.random.SeedSequence(self.settings.seed).spawn(count)

    def _generate_tiles(self, width: int, height: int) -> list[Tile]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples in scan order
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def to_ldr(self, image: np.ndarray) -> np.ndarray:
        """Convert the averaged image to 8-bit with gamma 2 correction."""
        return to_ldr(image)

    def save_image(self, image: np.ndarray, filename: str) -> None:
        """Save image to file (.ppm as P3 text, anything else through Pillow)."""
        ppm.save_image(image, filename)

#!/usr/bin/env python3
"""
prismtrace - A Python Ray Tracing Renderer

Main entry point for rendering scenes. The image goes to --output (a PPM
file by default, '-' for standard output); progress and timing go to
standard error so they never mix with the pixel stream.
"""

import argparse
import sys
import time
from pathlib import Path

import numpy as np

from prismtrace.vec3 import Color, Point3
from prismtrace.camera import Camera, CameraBuilder
from prismtrace.shapes import Sphere, HittableList
from prismtrace.materials import Lambertian, Metal, Dielectric
from prismtrace.renderer import Renderer, RenderSettings
from prismtrace.color import to_ldr
from prismtrace.ppm import write_ppm
from prismtrace.scene_parser import SceneParseError, load_scene


def log(message: str, end: str = '\n') -> None:
    print(message, file=sys.stderr, end=end, flush=True)


def create_default_scene() -> HittableList:
    """Ground, a diffuse center sphere, a glass sphere and a metal sphere."""
    world = HittableList()

    material_ground = Lambertian(Color(0.8, 0.8, 0.0))
    material_center = Lambertian(Color(0.1, 0.2, 0.5))
    material_left = Dielectric(1.5)
    material_right = Metal(Color(0.7, 0.6, 0.2), 0.0)

    world.add(Sphere(Point3(0, 0, -1), 0.5, material_center))
    world.add(Sphere(Point3(0, -100.5, -1), 100, material_ground))
    world.add(Sphere(Point3(-1, 0, -1), 0.5, material_left))
    world.add(Sphere(Point3(1, 0, -1), 0.5, material_right))

    return world


def default_camera(aspect_ratio: float) -> Camera:
    return (
        CameraBuilder(Point3(-2, 2, 1), Point3(0, 0, -1))
        .set_aspect_ratio(aspect_ratio)
        .build()
    )


def create_random_scene(rng: np.random.Generator) -> HittableList:
    """A field of small random spheres around three large ones."""
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    small = HittableList()
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - Point3(4, 0.2, 0)).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Color.random(rng=rng) * Color.random(rng=rng)
                small.add(Sphere(center, 0.2, Lambertian(albedo)))
            elif choose_mat < 0.95:
                albedo = Color.random(0.5, 1, rng)
                fuzz = rng.uniform(0, 0.5)
                small.add(Sphere(center, 0.2, Metal(albedo, fuzz)))
            else:
                small.add(Sphere(center, 0.2, Dielectric(1.5)))
    world.add(small)

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return world


def random_camera(aspect_ratio: float) -> Camera:
    return (
        CameraBuilder(Point3(13, 2, 3), Point3(0, 0, 0))
        .set_aspect_ratio(aspect_ratio)
        .set_aperture(0.1)
        .set_focus_distance(10.0)
        .build()
    )


def main(argv=None):
    """Run the CLI with ``argv`` (defaults to sys.argv) and return the exit status."""
    parser = argparse.ArgumentParser(
        description='prismtrace - A Python Ray Tracing Renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.ppm
  python main.py --scene random --samples 20 --seed 1 --output cover.png
  python main.py --scene-file scene.yaml --output - > image.ppm
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: width / (16/9))')
    parser.add_argument('--samples', type=int, default=100, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=50, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible renders')
    parser.add_argument('--output', type=str, default='output/render.ppm',
                        help="Output filename, or '-' for PPM on stdout")
    parser.add_argument('--scene', type=str, default='default', choices=['default', 'random'],
                        help='Built-in scene to render (default: default)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='YAML or JSON scene description (overrides --scene and the size flags)')

    args = parser.parse_args(argv)

    if args.scene_file:
        try:
            world, camera, settings = load_scene(args.scene_file)
        except SceneParseError as e:
            log(f"Error: {e}")
            return 1
        scene_name = args.scene_file
    else:
        height = args.height if args.height is not None else int(args.width / (16.0 / 9.0))
        try:
            settings = RenderSettings(
                width=args.width,
                height=height,
                samples_per_pixel=args.samples,
                max_depth=args.depth,
                num_threads=args.threads,
                seed=args.seed
            )
        except ValueError as e:
            log(f"Error: {e}")
            return 1

        scene_name = args.scene
        if args.scene == 'random':
            world = create_random_scene(np.random.default_rng(args.seed))
            camera = random_camera(settings.aspect_ratio)
        else:
            world = create_default_scene()
            camera = default_camera(settings.aspect_ratio)

    log(f"Scene: {scene_name} ({len(world)} objects)")
    log(f"  Resolution: {settings.width}x{settings.height}")
    log(f"  Samples: {settings.samples_per_pixel}")
    log(f"  Max Depth: {settings.max_depth}")
    log(f"  Threads: {settings.num_threads}")

    renderer = Renderer(settings)

    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '#' * filled + '.' * (bar_len - filled)
            log(f'\rRendering: [{bar}] {pct}%', end='')

    renderer.set_progress_callback(progress_callback)

    start_time = time.time()
    image = renderer.render(world, camera)
    elapsed = time.time() - start_time

    log(f"\nRender completed in {elapsed:.2f} seconds")

    if args.output == '-':
        write_ppm(sys.stdout, to_ldr(image))
    else:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        log(f"Saving to: {args.output}")
        renderer.save_image(image, args.output)

    log("Done")
    return 0


if __name__ == '__main__':
    sys.exit(main())

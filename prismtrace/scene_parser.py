"""
Scene description language parser.

Supports YAML or JSON scene descriptions with:
- Camera configuration
- Render settings
- Materials library
- Objects (spheres with materials)

Example scene file:
```yaml
camera:
  look_from: [-2, 2, 1]
  look_at: [0, 0, -1]
  vfov: 20
  aperture: 0.5

render:
  width: 400
  height: 225
  samples: 100
  max_depth: 50
  seed: 7

materials:
  ground:
    type: lambertian
    albedo: [0.8, 0.8, 0.0]

  glass:
    type: dielectric
    refraction_index: 1.5

objects:
  - type: sphere
    center: [0, -100.5, -1]
    radius: 100
    material: ground

  - type: sphere
    center: [-1, 0, -1]
    radius: 0.5
    material: glass
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json

from .vec3 import Vec3, Point3, Color
from .camera import Camera, CameraBuilder
from .shapes import Sphere, HittableList
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: HittableList = HittableList()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        if path.suffix in ('.yaml', '.yml'):
            try:
                import yaml
            except ImportError:
                raise SceneParseError("PyYAML not installed. Install with: pip install pyyaml")
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise SceneParseError(f"Invalid YAML in {filepath}: {e}") from e
        else:
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise SceneParseError(f"Invalid JSON in {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        # Parse materials first (objects reference them)
        self._parse_materials(self._section(data, 'materials'))

        objects_data = data.get('objects')
        if objects_data is not None:
            self._parse_objects(objects_data)

        # Settings before camera: the default aspect ratio follows the image size
        self._parse_settings(self._section(data, 'render'))
        self._parse_camera(self._section(data, 'camera'))

        return self.objects, self.camera, self.settings

    def _section(self, data: Dict[str, Any], key: str) -> Dict[str, Any]:
        """Return a mapping section; an absent or empty section is {}."""
        section = data.get(key)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise SceneParseError(f"'{key}' must be a mapping, got {type(section).__name__}")
        return section

    def _parse_float(self, value: Any, name: str) -> float:
        """Parse a scalar, reporting bad values as SceneParseError."""
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid value for '{name}': {value!r}") from e

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        try:
            if isinstance(data, (list, tuple)):
                if len(data) != 3:
                    raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            elif isinstance(data, dict):
                return Vec3(
                    float(data.get('x', 0)),
                    float(data.get('y', 0)),
                    float(data.get('z', 0))
                )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}") from e
        raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, dict):
            return Color(
                self._parse_float(data.get('r', 0), 'r'),
                self._parse_float(data.get('g', 0), 'g'),
                self._parse_float(data.get('b', 0), 'b')
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                try:
                    r = int(data[1:3], 16) / 255.0
                    g = int(data[3:5], 16) / 255.0
                    b = int(data[5:7], 16) / 255.0
                except ValueError as e:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from e
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        return self._parse_vec3(data)

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        """Build one material from its description."""
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Invalid material definition: {mat_data}")
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = self._parse_float(mat_data.get('fuzz', 0.0), 'fuzz')
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            # 'ior' is accepted as a shorthand
            index = mat_data.get('refraction_index', mat_data.get('ior', 1.5))
            return Dielectric(self._parse_float(index, 'refraction_index'))

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        if not isinstance(materials_data, dict):
            raise SceneParseError("'materials' must be a mapping of name to material")
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Object has no material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        if not isinstance(objects_data, list):
            raise SceneParseError("'objects' must be a list")
        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Invalid object entry: {obj_data}")
            obj_type = str(obj_data.get('type', 'sphere')).lower()

            if obj_type == 'sphere':
                material = self._get_material(obj_data.get('material'))
                center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                radius = self._parse_float(obj_data.get('radius', 1.0), 'radius')
                self.objects.add(Sphere(center, radius, material))

            elif obj_type == 'group':
                # Nested lists are hittables too
                nested = SceneParser()
                nested.materials = self.materials
                nested._parse_objects(obj_data.get('objects') or [])
                self.objects.add(nested.objects)

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section, falling back to the builder defaults."""
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))

        builder = CameraBuilder(look_from, look_at)
        builder.set_aspect_ratio(self._parse_float(
            camera_data.get('aspect_ratio', self.settings.aspect_ratio), 'aspect_ratio'))
        if 'vup' in camera_data:
            builder.set_up_vector(self._parse_vec3(camera_data['vup']))
        if 'vfov' in camera_data:
            builder.set_vfov(self._parse_float(camera_data['vfov'], 'vfov'))
        if 'aperture' in camera_data:
            builder.set_aperture(self._parse_float(camera_data['aperture'], 'aperture'))
        if 'focus_dist' in camera_data:
            builder.set_focus_distance(self._parse_float(camera_data['focus_dist'], 'focus_dist'))

        self.camera = builder.build()

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        try:
            self.settings = RenderSettings(
                width=int(settings_data.get('width', 400)),
                height=int(settings_data.get('height', 225)),
                samples_per_pixel=int(settings_data.get('samples', 100)),
                max_depth=int(settings_data.get('max_depth', 50)),
                tile_size=int(settings_data.get('tile_size', 32)),
                num_threads=int(settings_data.get('threads', 0)),
                seed=int(seed) if seed is not None else None
            )
        except (TypeError, ValueError) as e:
            raise SceneParseError(f"Invalid render settings: {e}") from e


def load_scene(filepath: str) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[HittableList, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)

"""Tests for geometric shapes."""

import pytest
import dataclasses
import math
from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.shapes import Sphere, HittableList, HitRecord
from prismtrace.materials import Lambertian, Metal


@pytest.fixture
def material():
    return Lambertian(Color(0.5, 0.5, 0.5))


class TestHitRecord:
    """Test HitRecord face orientation."""

    def test_front_face_keeps_outward_normal(self, material):
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        record = HitRecord.from_outward_normal(ray, Point3(0, 0, 1), Vec3(0, 0, 1), 4.0, material)
        assert record.front_face is True
        assert record.normal == Vec3(0, 0, 1)

    def test_back_face_flips_normal(self, material):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        record = HitRecord.from_outward_normal(ray, Point3(0, 0, 1), Vec3(0, 0, 1), 1.0, material)
        assert record.front_face is False
        assert record.normal == Vec3(0, 0, -1)

    def test_is_immutable(self, material):
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        record = HitRecord.from_outward_normal(ray, Point3(0, 0, 1), Vec3(0, 0, 1), 4.0, material)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.t = 1.0

    def test_material_is_shared_not_copied(self, material):
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        record = HitRecord.from_outward_normal(ray, Point3(0, 0, 1), Vec3(0, 0, 1), 4.0, material)
        assert record.material is material


class TestSphere:
    """Test Sphere class."""

    def test_creation(self, material):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0, material)
        assert sphere.center == center
        assert sphere.radius == 1.0
        assert sphere.material is material

    def test_hit_from_front(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert abs(hit.t - 4.0) < 1e-12
        assert hit.point == Point3(0, 0, 1)
        assert hit.normal == Vec3(0, 0, 1)
        assert hit.front_face is True
        assert hit.material is material

    def test_hit_normal_is_unit_length(self, material):
        sphere = Sphere(Point3(1, 2, 3), 2.5, material)
        ray = Ray(Point3(0, 0, 10), Vec3(0.1, 0.2, -1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert abs(hit.normal.length() - 1.0) < 1e-12

    def test_hit_from_inside(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is not None
        assert hit.front_face is False
        assert abs(hit.t - 1.0) < 1e-12
        # Normal points back toward the ray origin
        assert hit.normal == Vec3(0, 0, -1)

    def test_normal_opposes_ray(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        for ray in (
            Ray(Point3(0, 0, 5), Vec3(0, 0, -1)),
            Ray(Point3(0, 0, 0), Vec3(0.3, 0.4, 0.5)),
            Ray(Point3(3, 0.2, 0), Vec3(-1, 0, 0)),
        ):
            hit = sphere.hit(ray, 0.001, float('inf'))
            assert hit is not None
            assert hit.normal.dot(ray.direction) < 0

    def test_miss(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 5, -5), Vec3(0, 0, 1))  # Ray passes above sphere
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is None

    def test_tangent_ray_is_a_miss(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(-5, 1, 0), Vec3(1, 0, 0))  # Discriminant is exactly zero
        assert sphere.hit(ray, 0.001, float('inf')) is None

    def test_behind_ray(self, material):
        sphere = Sphere(Point3(0, 0, -5), 1.0, material)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))  # Ray points away from sphere
        hit = sphere.hit(ray, 0.001, float('inf'))

        assert hit is None

    def test_t_min_selects_far_root(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))

        # Near hit is at t=4, exclude it with t_min
        hit = sphere.hit(ray, 4.5, float('inf'))
        assert hit is not None
        assert abs(hit.t - 6.0) < 1e-12
        assert hit.front_face is False

    def test_t_max_excludes_both_roots(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        assert sphere.hit(ray, 0.001, 3.9) is None

    def test_interval_is_open(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        # t=4 on the upper bound is excluded, t=6 is out of range as well
        assert sphere.hit(ray, 0.001, 4.0) is None
        # t=4 on the lower bound is excluded, the far root remains
        hit = sphere.hit(ray, 4.0, float('inf'))
        assert abs(hit.t - 6.0) < 1e-12

    def test_unnormalized_direction(self, material):
        sphere = Sphere(Point3(0, 0, 0), 1.0, material)
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -2))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert abs(hit.t - 2.0) < 1e-12
        assert hit.point == Point3(0, 0, 1)

    def test_negative_radius_flips_outward_normal(self, material):
        sphere = Sphere(Point3(0, 0, 0), -1.0, material)
        ray = Ray(Point3(0, 0, 5), Vec3(0, 0, -1))
        hit = sphere.hit(ray, 0.001, float('inf'))
        assert hit is not None
        assert hit.front_face is False
        assert hit.normal == Vec3(0, 0, 1)


class TestHittableList:
    """Test HittableList class."""

    def test_empty_list(self):
        world = HittableList()
        assert len(world) == 0
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert world.hit(ray, 0.001, float('inf')) is None

    def test_add_and_clear(self, material):
        world = HittableList()
        world.add(Sphere(Point3(0, 0, -1), 0.5, material))
        world.add(Sphere(Point3(0, 0, -3), 0.5, material))
        assert len(world) == 2
        assert len(list(world)) == 2
        world.clear()
        assert len(world) == 0

    def test_initial_list_is_copied(self, material):
        objects = [Sphere(Point3(0, 0, -1), 0.5, material)]
        world = HittableList(objects)
        world.add(Sphere(Point3(0, 0, -3), 0.5, material))
        world.clear()
        assert len(objects) == 1

    def test_accepts_any_iterable(self, material):
        world = HittableList(Sphere(Point3(0, 0, -z), 0.5, material) for z in (1, 3))
        assert len(world) == 2

    def test_returns_closest_hit(self, material):
        near_material = Metal(Color(1, 1, 1), 0.0)
        far = Sphere(Point3(0, 0, -10), 1.0, material)
        near = Sphere(Point3(0, 0, -4), 1.0, near_material)
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for world in (HittableList([far, near]), HittableList([near, far])):
            hit = world.hit(ray, 0.001, float('inf'))
            assert hit is not None
            assert abs(hit.t - 3.0) < 1e-12
            assert hit.material is near_material

    def test_respects_t_max(self, material):
        world = HittableList([Sphere(Point3(0, 0, -10), 1.0, material)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert world.hit(ray, 0.001, 5.0) is None

    def test_tightens_upper_bound(self, material):
        calls = []

        class RecordingSphere(Sphere):
            def hit(self, ray, t_min, t_max):
                calls.append(t_max)
                return super().hit(ray, t_min, t_max)

        world = HittableList([
            RecordingSphere(Point3(0, 0, -4), 1.0, material),
            RecordingSphere(Point3(0, 0, -10), 1.0, material),
        ])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        world.hit(ray, 0.001, float('inf'))

        assert calls[0] == float('inf')
        assert abs(calls[1] - 3.0) < 1e-12

    def test_nested_lists(self, material):
        inner = HittableList([Sphere(Point3(0, 0, -4), 1.0, material)])
        outer = HittableList([Sphere(Point3(0, 0, -10), 1.0, material), inner])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        hit = outer.hit(ray, 0.001, float('inf'))
        assert abs(hit.t - 3.0) < 1e-12

    def test_miss_everything(self, material):
        world = HittableList([
            Sphere(Point3(0, 0, -4), 1.0, material),
            Sphere(Point3(3, 0, -4), 1.0, material),
        ])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, 1))
        assert world.hit(ray, 0.001, float('inf')) is None

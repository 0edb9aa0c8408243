import numpy as np
import pytest

from speedgun.geometry.camera import PinholeCamera
from speedgun.sensing.depth import DepthBuffer, DepthSampler
from speedgun.sensing.raycast import Plane, PlaneAlignment, PlaneEnvironment, RayResolver, RaycastTarget
from speedgun.utils.types import ViewSize

from helpers import FixedRays


def _buffer():
    # 3 rows x 4 cols, value == flat index
    return DepthBuffer(np.arange(12, dtype=np.float32).reshape(3, 4))


def test_depth_sample_pairs_axes_independently():
    sampler = DepthSampler()
    # col = floor(250 * 4 / 800) = 1, row = floor(150 * 3 / 300) = 1
    assert sampler.sample((250, 150), _buffer(), ViewSize(800, 300)) == 5.0


def test_depth_sample_truncates_toward_floor():
    sampler = DepthSampler()
    assert sampler.sample((399.9, 299.9), _buffer(), ViewSize(400, 300)) == 11.0
    assert sampler.sample((0.0, 0.0), _buffer(), ViewSize(400, 300)) == 0.0


def test_depth_sample_out_of_bounds_is_unavailable():
    sampler = DepthSampler()
    view = ViewSize(400, 300)
    assert sampler.sample((400, 10), _buffer(), view) is None
    assert sampler.sample((10, 300), _buffer(), view) is None
    assert sampler.sample((-1, 10), _buffer(), view) is None


def test_depth_sample_without_buffer_or_finite_value():
    sampler = DepthSampler()
    assert sampler.sample((1, 1), None, ViewSize(10, 10)) is None
    nan_buf = DepthBuffer(np.full((2, 2), np.nan, dtype=np.float32))
    assert sampler.sample((1, 1), nan_buf, ViewSize(10, 10)) is None


def test_depth_buffer_lock_released_on_every_exit():
    buf = _buffer()
    DepthSampler().sample((10, 10), buf, ViewSize(400, 300))
    assert not buf.locked
    with pytest.raises(RuntimeError):
        with buf.read():
            assert buf.locked
            raise RuntimeError("boom")
    assert not buf.locked


def test_depth_buffer_rejects_non_2d():
    with pytest.raises(ValueError):
        DepthBuffer(np.zeros((2, 2, 2)))


def _camera():
    return PinholeCamera(fx=500, fy=500, cx=500, cy=500)


def test_plane_environment_hits_wall_in_front():
    wall = Plane.from_point_normal([0, 0, 5], [0, 0, -1], "vertical")
    env = PlaneEnvironment(_camera(), [wall])
    hits = env.raycast((500, 500))
    assert len(hits) == 1
    assert np.allclose(hits[0].position, [0, 0, 5])
    assert hits[0].distance == pytest.approx(5.0)


def test_plane_environment_ground_hit_below_center():
    ground = Plane.from_point_normal([0, 1.5, 0], [0, -1, 0], "horizontal")
    env = PlaneEnvironment(_camera(), [ground])
    hits = env.raycast((500, 750))
    assert np.allclose(hits[0].position, [0.0, 1.5, 3.0])


def test_plane_environment_misses_parallel_and_behind():
    ground = Plane.from_point_normal([0, 1.5, 0], [0, -1, 0])
    behind = Plane.from_point_normal([0, 0, -5], [0, 0, 1], "vertical")
    env = PlaneEnvironment(_camera(), [ground, behind])
    assert env.raycast((500, 500)) == []


def test_plane_environment_ranks_nearest_first_and_filters_alignment():
    near = Plane.from_point_normal([0, 0, 2], [0, 0, -1], "vertical")
    far = Plane.from_point_normal([0, 0, 9], [0, 0, -1], "horizontal")
    env = PlaneEnvironment(_camera(), [far, near])
    hits = env.raycast((500, 500))
    assert [h.distance for h in hits] == pytest.approx([2.0, 9.0])
    only_h = env.raycast((500, 500), RaycastTarget.ESTIMATED_PLANE, PlaneAlignment.HORIZONTAL)
    assert [h.distance for h in only_h] == pytest.approx([9.0])


def test_ray_resolver_takes_first_hit_from_single_query():
    rays = FixedRays((1, 2, 3), (4, 5, 6))
    hit = RayResolver().resolve((10, 20), rays)
    assert np.allclose(hit, [1, 2, 3])
    assert rays.queries == [((10, 20), RaycastTarget.ESTIMATED_PLANE, PlaneAlignment.ANY)]


def test_ray_resolver_no_hit():
    assert RayResolver().resolve((10, 20), FixedRays()) is None

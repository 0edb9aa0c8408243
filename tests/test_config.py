from pathlib import Path

import numpy as np
import pytest

from speedgun.geometry.camera import PinholeCamera
from speedgun.runtime.session import TrackingSession
from speedgun.sensing.raycast import PlaneAlignment, PlaneEnvironment
from speedgun.utils.config import get, get_vec3, load_yaml
from speedgun.utils.types import ViewSize

SYSTEM_YAML = Path(__file__).resolve().parents[1] / "configs" / "system.yaml"


def test_system_config_builds_pipeline():
    cfg = load_yaml(SYSTEM_YAML)
    view = ViewSize(1280, 720)

    camera = PinholeCamera.from_config(cfg, view)
    env = PlaneEnvironment.from_config(cfg, camera)
    session = TrackingSession.from_config(cfg)

    assert session.target_class == "sports ball"
    assert session.history.max_size == 5
    assert (camera.cx, camera.cy) == (640.0, 360.0)
    assert len(env.planes) == 1
    assert env.planes[0].alignment == PlaneAlignment.HORIZONTAL
    hits = env.raycast((640.0, 600.0))
    assert hits and hits[0].position[1] == pytest.approx(1.5)


def test_explicit_intrinsics_and_pose():
    cfg = {"camera": {"fx": 800, "position": [0, -1, 0]}}
    cam = PinholeCamera.from_config(cfg, ViewSize(640, 480))
    assert (cam.fx, cam.fy, cam.cx, cam.cy) == (800.0, 800.0, 320.0, 240.0)
    assert np.allclose(cam.position, [0, -1, 0])


def test_get_dot_path_and_defaults():
    cfg = {"tracking": {"history_size": 7}}
    assert get(cfg, "tracking.history_size") == 7
    assert get(cfg, "tracking.missing", "x") == "x"
    assert get(cfg, "camera.position.z", 1) == 1


def test_get_vec3_validates_length():
    assert get_vec3({}, "camera.position", (1, 2, 3)) == (1.0, 2.0, 3.0)
    with pytest.raises(ValueError):
        get_vec3({"camera": {"position": [1, 2]}}, "camera.position", (0, 0, 0))


def test_load_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "missing.yaml")

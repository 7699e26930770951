import os

import pytest
import yaml

from planar_homography.geometry.correspondences import LinePair, PointPair
from planar_homography.geometry.primitives import Line, Point
from planar_homography.utils.config import (
    boundary_line_pairs,
    ensure_output_dirs,
    load_config,
    scene_correspondences,
    validate_scenes,
)

DEFAULT_CONFIG = os.path.join(os.path.dirname(os.path.dirname(__file__)), "configs", "default.yaml")


def quad_scene(**extra):
    scene = {
        "name": "quad",
        "source": [[148, 337], [131, 516], [321, 486], [332, 370]],
        "target": [[0, 0], [0, 60], [80, 60], [80, 0]],
    }
    scene.update(extra)
    return scene


def test_load_default_config():
    cfg = load_config(DEFAULT_CONFIG)
    names = [s["name"] for s in cfg["scenes"]]
    assert "quad" in names
    assert cfg["dtype"] in ("float32", "float64")


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_points_only_scene():
    pairs = scene_correspondences(quad_scene())
    assert len(pairs) == 4
    assert all(isinstance(p, PointPair) for p in pairs)
    assert pairs[1] == PointPair(Point(131.0, 516.0), Point(0.0, 60.0))


def test_boundary_lines_follow_points():
    pairs = scene_correspondences(quad_scene(boundary_lines=True))

    assert [type(p) for p in pairs] == [PointPair] * 4 + [LinePair] * 4
    first_edge = pairs[4]
    assert first_edge.l1 == Line.from_points(Point(148.0, 337.0), Point(131.0, 516.0))
    assert first_edge.l2 == Line.from_points(Point(0.0, 0.0), Point(0.0, 60.0))


def test_boundary_lines_close_polygon():
    src = [Point(0, 0), Point(1, 0), Point(1, 1)]
    dst = [Point(0, 0), Point(2, 0), Point(2, 2)]
    pairs = boundary_line_pairs(src, dst)
    assert len(pairs) == 3
    assert pairs[-1].l1.contains(src[2]) and pairs[-1].l1.contains(src[0])
    assert boundary_line_pairs(src[:1], dst[:1]) == []


def test_explicit_lines_and_no_lines_flag():
    scene = quad_scene(boundary_lines=True,
                       lines=[{"source": [1, 2, 3], "target": [4, 5, 6]}])

    pairs = scene_correspondences(scene)
    assert len(pairs) == 9
    assert pairs[-1] == LinePair(Line(1.0, 2.0, 3.0), Line(4.0, 5.0, 6.0))

    assert len(scene_correspondences(scene, use_lines=False)) == 4


@pytest.mark.parametrize("scene", [
    quad_scene(target=[[0, 0], [0, 60]]),
    quad_scene(source=[[1, 2, 3]], target=[[0, 0]]),
    quad_scene(lines=[{"source": [1, 2]}]),
    quad_scene(lines=[{"source": [1, 2], "target": [1, 2, 3]}]),
])
def test_malformed_scene(scene):
    with pytest.raises(ValueError):
        scene_correspondences(scene)


def test_ensure_output_dirs(tmp_path):
    ensure_output_dirs(["a", "b"], base=str(tmp_path / "out"))
    assert (tmp_path / "out" / "a").is_dir()
    assert (tmp_path / "out" / "b").is_dir()


def test_default_config_is_valid_yaml():
    with open(DEFAULT_CONFIG) as fh:
        cfg = yaml.safe_load(fh)
    for scene in cfg["scenes"]:
        assert scene_correspondences(scene)


def test_validate_scenes():
    good = {"scenes": [quad_scene()]}
    assert validate_scenes(good) == good["scenes"]
    assert validate_scenes({}) == []

    for bad in ({"scenes": {"name": "quad"}},
                {"scenes": ["quad"]},
                {"scenes": [{"source": []}]},
                {"scenes": [{"name": ""}]}):
        with pytest.raises(ValueError):
            validate_scenes(bad)

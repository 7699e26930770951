"""
Scene configuration.

A YAML file lists one or more scenes, each a set of source/target point
correspondences with optional line correspondences.  See
``configs/default.yaml`` for the layout.
"""

import os
from typing import List

import yaml

from planar_homography.geometry.correspondences import LinePair, PointPair
from planar_homography.geometry.primitives import Line, Point


def load_config(path: str) -> dict:
    with open(path, "r") as fh:
        cfg = yaml.safe_load(fh)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config {path} must contain a mapping at the top level")
    return cfg


def validate_scenes(cfg: dict) -> List[dict]:
    """Return ``cfg["scenes"]`` after checking every entry is a named mapping.

    Raises
    ------
    ValueError
        If ``scenes`` is not a list, or an entry is not a mapping with a
        non-empty string ``name``.
    """
    scenes = cfg.get("scenes") or []
    if not isinstance(scenes, list):
        raise ValueError("'scenes' must be a list")
    for idx, scene in enumerate(scenes):
        if not isinstance(scene, dict):
            raise ValueError(f"Scene #{idx + 1} must be a mapping, got {scene!r}")
        name = scene.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError(f"Scene #{idx + 1} needs a non-empty string 'name'")
    return scenes


def _points(raw, scene: str, key: str) -> List[Point]:
    pts = []
    for item in raw or []:
        if len(item) != 2:
            raise ValueError(f"Scene '{scene}': {key} entries must be [x, y], got {item}")
        pts.append(Point(float(item[0]), float(item[1])))
    return pts


def _line(raw, scene: str) -> Line:
    if raw is None or len(raw) != 3:
        raise ValueError(f"Scene '{scene}': line entries must be [a, b, c], got {raw}")
    return Line(float(raw[0]), float(raw[1]), float(raw[2]))


def boundary_line_pairs(source: List[Point], target: List[Point]) -> List[LinePair]:
    """Pair the edges of the closed source polygon with those of the target.

    Edge *i* joins point *i* to point *i + 1* (wrapping around), so
    corresponding edges are built from corresponding vertices.
    """
    n = len(source)
    if n < 2:
        return []
    return [
        LinePair(Line.from_points(source[i], source[(i + 1) % n]),
                 Line.from_points(target[i], target[(i + 1) % n]))
        for i in range(n)
    ]


def scene_correspondences(scene_cfg: dict, use_lines: bool = True) -> list:
    """Build the ordered correspondence list for one scene.

    Parameters
    ----------
    scene_cfg : dict
        One entry of the ``scenes`` list.
    use_lines : bool
        When False, boundary and explicit line correspondences are skipped.

    Returns
    -------
    list of PointPair and LinePair
        Point pairs first, then boundary lines, then explicit lines.

    Raises
    ------
    ValueError
        If the scene is malformed.
    """
    name = scene_cfg.get("name", "<unnamed>")
    source = _points(scene_cfg.get("source"), name, "source")
    target = _points(scene_cfg.get("target"), name, "target")
    if len(source) != len(target):
        raise ValueError(f"Scene '{name}': {len(source)} source points but "
                         f"{len(target)} target points")

    pairs = [PointPair(p1, p2) for p1, p2 in zip(source, target)]
    if not use_lines:
        return pairs

    if scene_cfg.get("boundary_lines", False):
        pairs.extend(boundary_line_pairs(source, target))

    for entry in scene_cfg.get("lines") or []:
        if not isinstance(entry, dict) or "source" not in entry or "target" not in entry:
            raise ValueError(f"Scene '{name}': line entries need 'source' and 'target'")
        pairs.append(LinePair(_line(entry["source"], name), _line(entry["target"], name)))

    return pairs


def ensure_output_dirs(scenes: list, base: str = "results") -> None:
    """Create output subdirectories for each scene name.

    Parameters
    ----------
    scenes : list of str
        Scene identifiers (one subdirectory is created per scene).
    base : str
        Root output directory.
    """
    for scene in scenes:
        os.makedirs(os.path.join(base, scene), exist_ok=True)

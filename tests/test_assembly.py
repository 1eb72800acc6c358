import dataclasses
import json

import numpy as np
import pytest

from dactyl_csg.configuration import DEFAULT_CONFIG, save_config
from dactyl_csg.dactyl_manuform import (
    generate,
    main,
    model_base,
    model_left,
    model_right,
    plate_left,
    plate_right,
)
from dactyl_csg.engines.csg_engine import geometry_engine as ge
from dactyl_csg.shapes import as_dict, bounds, vertices
from dactyl_csg.walls import front_wall_braces, ground_clip, thumb_wall_braces

VARIANTS = ("right", "left", "right-plate", "left-plate", "right-test")


@pytest.fixture(scope="module")
def variants():
    return generate(DEFAULT_CONFIG)


def test_generate_every_variant(variants):
    assert tuple(variants) == VARIANTS


def test_generation_is_deterministic(variants):
    again = generate(DEFAULT_CONFIG)
    assert again == variants
    assert json.dumps(as_dict(again["right"])) == json.dumps(as_dict(variants["right"]))


def test_left_is_the_mirror_of_right(variants):
    assert variants["left"] == ge.mirror(variants["right"], (1, 0, 0))
    assert variants["left-plate"] == ge.mirror(variants["right-plate"], (1, 0, 0))

    right, left = vertices(variants["right"]), vertices(variants["left"])
    assert np.allclose(left, right * [-1, 1, 1])


@pytest.mark.parametrize("changes", [
    {},
    {"column_style": "orthographic", "wide_pinky": False},
    {"column_style": "fixed", "rows": 4},
])
def test_mirror_law_for_each_model(changes):
    config = dataclasses.replace(DEFAULT_CONFIG, **changes)
    assert model_left(config) == ge.mirror(model_right(config), (1, 0, 0))
    assert plate_left(config) == ge.mirror(plate_right(config), (1, 0, 0))


def test_case_is_clipped_at_the_ground():
    shape = model_base(DEFAULT_CONFIG)
    assert shape.kind == "difference"
    body, clip = shape.children
    assert clip == ground_clip(DEFAULT_CONFIG, body)
    assert bounds(clip)[1][2] == pytest.approx(0)


def test_connector_cavities_are_optional():
    config = dataclasses.replace(DEFAULT_CONFIG, connector_cavities=False)
    assert model_right(config) == model_base(config)
    assert model_right(DEFAULT_CONFIG) != model_base(DEFAULT_CONFIG)


def test_plate_starts_at_the_ground(variants):
    plate = variants["right-plate"]
    assert plate.kind == "difference"
    lower, upper = bounds(plate)
    assert lower[2] == pytest.approx(0)
    assert upper[2] > DEFAULT_CONFIG.plate_thickness


def test_main_writes_every_variant(tmp_path):
    out = tmp_path / "things"
    assert main(["--engine", "csg", "--out", str(out), "--log-level", "WARNING"]) == 0
    written = {}
    for name in VARIANTS:
        with open(out / (name + ".json"), encoding="utf-8") as fid:
            written[name] = json.load(fid)

    for name in ("right", "right-plate", "right-test"):
        assert "operation" in written[name]
    for name in ("right", "right-plate"):
        mirrored = written[name.replace("right", "left")]
        assert mirrored["transform"] == "mirror"
        assert mirrored["vector"] == [1, 0, 0]
        assert mirrored["child"] == written[name]


def test_main_reads_a_configuration_file(tmp_path):
    path = tmp_path / "keyboard.json"
    save_config(path, dataclasses.replace(DEFAULT_CONFIG, rows=4))
    out = tmp_path / "things"
    assert main(["--config", str(path), "--engine", "csg", "--out", str(out)]) == 0
    assert (out / "right.json").exists()


def test_main_rejects_a_bad_configuration(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"rows": 2}))
    out = tmp_path / "things"
    assert main(["--config", str(path), "--engine", "csg", "--out", str(out)]) == 1
    assert not out.exists()


@pytest.mark.parametrize("changes", [
    {"columns": 3},
    {"columns": 4},
    {"columns": 4, "lastrow_columns": (1, 2)},
    {"columns": 5, "wide_pinky": False},
])
def test_narrow_grids_generate(changes):
    config = dataclasses.replace(DEFAULT_CONFIG, **changes)
    variants = generate(config)
    assert tuple(variants) == VARIANTS
    assert variants["left"] == ge.mirror(variants["right"], (1, 0, 0))

    # the thumb wall ends where the front wall begins
    thumb_end = thumb_wall_braces(config)[-1].children[0].children
    front_start = front_wall_braces(config)[0].children[0].children
    assert thumb_end[4] == front_start[0]
    assert thumb_end[5] == front_start[1]

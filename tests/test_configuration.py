import argparse
import dataclasses
import json
import math

import pytest

from dactyl_csg.configuration import (
    DEFAULT_CONFIG,
    GenerateConfigAction,
    KeyboardConfig,
    config_from_dict,
    load_config,
    save_config,
    shape_config,
)
from dactyl_csg.errors import ConfigurationError


def test_default_derived_values():
    c = DEFAULT_CONFIG
    assert c.lastrow == 4
    assert c.cornerrow == 3
    assert c.lastcol == 5
    assert c.reduced_inner_cols == 2
    assert c.reduced_outer_cols == 2
    assert pytest.approx(c.mount_width) == 17.2
    assert pytest.approx(c.mount_height) == 17.2
    assert pytest.approx(c.row_pitch) == 18.2
    assert pytest.approx(c.column_pitch) == 19.7
    assert pytest.approx(c.cap_top_height) == 14.7


def test_radius_follows_pitch_and_curvature():
    c = DEFAULT_CONFIG
    expected = (c.row_pitch / 2) / math.sin(c.row_curvature / 2) + c.cap_top_height
    assert pytest.approx(c.row_radius) == expected
    assert pytest.approx(c.column_x_delta) == -1 - c.column_radius * math.sin(c.column_curvature)


def test_zero_curvature_is_flat():
    c = dataclasses.replace(DEFAULT_CONFIG, row_curvature=0.0, column_curvature=0.0)
    assert c.row_radius is None
    assert c.column_radius is None
    assert pytest.approx(c.column_x_delta) == -1 - c.column_pitch


@pytest.mark.parametrize("changes", [
    {"rows": 2},
    {"columns": 2},
    {"center_row": 5},
    {"center_col": -1},
    {"row_curvature": math.pi},
    {"column_curvature": -4.0},
    {"column_style": "spiral"},
    {"column_style": "fixed", "fixed_x": (0.0,) * 5},
    {"column_offsets": ((0.0, 0.0, 0.0),) * 5},
    {"column_offsets": ((0.0, 0.0),) * 6},
    {"thumb_offset": (1.0, 2.0)},
    {"usb_hole_offset": (1.0,)},
    {"trrs_hole_offset": (1.0, 2.0)},
    {"lastrow_columns": (0, 1)},
    {"lastrow_columns": ()},
    {"lastrow_columns": (4, 5)},
    {"columns": 4, "lastrow_columns": (2, 3)},
    {"lastrow_columns": (2, 4)},
    {"lastrow_columns": (2, 3, 4, 5)},
    {"screw_insert_locations": ((6, 0, (0.0, 0.0)),)},
    {"screw_insert_locations": ((0, -6, (0.0, 0.0)),)},
    {"screw_insert_locations": ((0, 0),)},
    {"screw_insert_locations": ((0, 0, (1.0, 2.0, 3.0)),)},
    {"resolution": 2},
])
def test_invalid_configuration_rejected(changes):
    with pytest.raises(ConfigurationError):
        dataclasses.replace(DEFAULT_CONFIG, **changes)


def test_longer_short_row_accepted():
    c = dataclasses.replace(DEFAULT_CONFIG, lastrow_columns=(2, 3, 4))
    assert c.reduced_outer_cols == 1
    assert c.has_key(4, c.lastrow)


@pytest.mark.parametrize("columns, short_row", [(3, (1,)), (4, (2,)), (5, (2, 3)), (6, (2, 3)), (7, (2, 3))])
def test_short_row_follows_the_grid_width(columns, short_row):
    c = dataclasses.replace(DEFAULT_CONFIG, columns=columns, column_offsets=((0.0, 0.0, 0.0),) * columns)
    assert c.lastrow_columns is None
    assert c.short_row_columns == short_row
    assert c.reduced_inner_cols == short_row[0]
    assert c.reduced_outer_cols == c.lastcol - short_row[-1]
    assert [column for column in range(columns) if c.has_key(column, c.lastrow)] == list(short_row)


def test_one_column_short_row_accepted():
    c = dataclasses.replace(DEFAULT_CONFIG, lastrow_columns=(3,))
    assert c.reduced_inner_cols == 3
    assert c.reduced_outer_cols == 2
    assert not c.has_key(4, c.lastrow)


def test_negative_screw_indices_resolve_against_grid():
    assert DEFAULT_CONFIG.screw_inserts == (
        (0, 0, (11.0, 10.0)),
        (0, 4, (0.0, 0.0)),
        (5, 4, (0.0, 12.0)),
        (5, 0, (0.0, 7.0)),
        (1, 4, (0.0, -16.0)),
    )
    taller = dataclasses.replace(DEFAULT_CONFIG, rows=6)
    assert taller.screw_inserts[1] == (0, 5, (0.0, 0.0))


def test_has_key():
    c = DEFAULT_CONFIG
    assert c.has_key(0, 0)
    assert c.has_key(2, c.lastrow)
    assert c.has_key(3, c.lastrow)
    assert not c.has_key(0, c.lastrow)
    assert not c.has_key(5, c.lastrow)
    assert not c.has_key(6, 0)
    assert not c.has_key(-1, 0)


def test_config_is_hashable_and_normalized():
    c = config_from_dict({"column_offsets": [[0, 0, 0]] * 6, "lastrow_columns": [2, 3]})
    assert c.column_offsets == ((0.0, 0.0, 0.0),) * 6
    assert c.lastrow_columns == (2, 3)
    assert hash(c) == hash(dataclasses.replace(c))


def test_unknown_keys_rejected():
    with pytest.raises(ConfigurationError, match="ncols"):
        config_from_dict({"ncols": 6})


def test_wrong_types_rejected():
    with pytest.raises(ConfigurationError):
        config_from_dict({"rows": "five"})


def test_round_trip_through_json(tmp_path):
    config = dataclasses.replace(DEFAULT_CONFIG, rows=4, column_style="orthographic", wide_pinky=False)
    path = tmp_path / "keyboard.json"
    save_config(path, config)
    assert load_config(path) == config


def test_default_dictionary_matches_default_config(tmp_path):
    path = tmp_path / "default.json"
    path.write_text(json.dumps(shape_config))
    assert load_config(path) == DEFAULT_CONFIG


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{rows: 5")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_non_object_json_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_generate_config_writes_defaults_and_exits(tmp_path):
    parser = argparse.ArgumentParser()
    parser.add_argument("--generate-config", action=GenerateConfigAction)
    path = tmp_path / "generated.json"

    with pytest.raises(SystemExit):
        parser.parse_args(["--generate-config", str(path)])

    assert load_config(path) == DEFAULT_CONFIG


def test_keyboard_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIG.rows = 6
    assert isinstance(DEFAULT_CONFIG, KeyboardConfig)

import argparse
import dataclasses
from dataclasses import dataclass
import json
import logging
import math
import pathlib
from typing import Any, Dict, Optional, Tuple

from .errors import ConfigurationError

COLUMN_STYLES = ("standard", "orthographic", "fixed")

Vector3 = Tuple[float, float, float]


def deg2rad(degrees: float) -> float:
    return degrees * math.pi / 180


@dataclass(frozen=True)
class KeyboardConfig:
    """
    The parameter set for one generation run.

    Angles are in radians, lengths in millimeters.
    Instances are immutable; use `dataclasses.replace` to derive variants.
    """

    # grid
    rows: int = 5
    columns: int = 6
    row_curvature: float = math.pi / 12  # curvature of the columns
    column_curvature: float = math.pi / 36  # curvature of the rows
    center_row: int = 2  # controls front-back tilt
    center_col: int = 2  # controls left-right tilt / tenting
    tenting_angle: float = math.pi / 12
    column_style: str = "standard"
    column_offsets: Tuple[Vector3, ...] = (
        (0.0, 0.0, 0.0),
        (0.0, 0.0, 0.0),
        (0.0, 2.82, -2.5),
        (0.0, 0.0, 0.0),
        (0.0, -12.0, 5.64),
        (0.0, -12.0, 5.64),
    )
    lastrow_columns: Optional[Tuple[int, ...]] = None  # None: columns 2-3, pulled in on narrow grids
    wide_pinky: bool = True
    wide_pinky_offset: float = 5.5
    thumb_offset: Vector3 = (6.0, -3.0, 7.0)
    z_offset: float = 12.0
    extra_width: float = 2.5
    extra_height: float = 1.0

    # column_style == "fixed"; fixed_z overrides the z part of the column offsets
    fixed_angles: Tuple[float, ...] = (deg2rad(10), deg2rad(10), 0.0, 0.0, 0.0, deg2rad(-15), deg2rad(-15))
    fixed_x: Tuple[float, ...] = (-41.5, -22.5, 0.0, 20.3, 41.4, 65.5, 89.6)  # relative to the middle finger
    fixed_z: Tuple[float, ...] = (12.1, 8.3, 0.0, 5.0, 10.7, 14.5, 17.5)
    fixed_tenting: float = 0.0

    # walls
    wall_thickness: float = 2.0
    wall_xy_offset: float = 5.0
    wall_z_offset: float = -5.0
    left_wall_x_offset: float = 5.0
    left_wall_z_offset: float = 3.0
    ground_clearance: float = 1.0

    # switch mount
    keyswitch_height: float = 14.2
    keyswitch_width: float = 14.2
    plate_rim: float = 1.5
    plate_thickness: float = 2.0
    side_nub_thickness: float = 4.0
    retention_tab_thickness: float = 1.5
    create_side_nubs: bool = True
    web_thickness: float = 2.0
    post_size: float = 0.1
    sa_profile_key_height: float = 12.7
    sa_length: float = 18.25
    sa_double_length: float = 37.5

    # screw inserts; locations are [column, row, [dx, dy]], negative indices count from the end
    screw_insert_height: float = 7.0
    screw_insert_bottom_radius: float = 5.3 / 2
    screw_insert_top_radius: float = 5.3 / 2
    screw_insert_wall: float = 1.65
    screw_hole_radius: float = 1.7
    screw_countersink_radius: float = 3.2
    screw_countersink_height: float = 2.2
    screw_insert_locations: Tuple[Tuple[int, int, Tuple[float, float]], ...] = (
        (0, 0, (11.0, 10.0)),
        (0, -1, (0.0, 0.0)),
        (-1, -1, (0.0, 12.0)),
        (-1, 0, (0.0, 7.0)),
        (1, -1, (0.0, -16.0)),
    )

    # controller cavities
    connector_cavities: bool = True
    usb_hole_offset: Tuple[float, float] = (23.0, 19.3)
    trrs_hole_offset: Vector3 = (-16.0, 0.0, -2.0)

    resolution: int = 30

    def __post_init__(self):
        self._normalize()
        self._validate()

    def _normalize(self):
        # JSON hands us lists; keep the instance hashable
        def setter(name, value):
            object.__setattr__(self, name, value)

        setter("column_offsets", tuple(tuple(float(v) for v in offset) for offset in self.column_offsets))
        if self.lastrow_columns is not None:
            setter("lastrow_columns", tuple(int(c) for c in self.lastrow_columns))
        setter("thumb_offset", tuple(float(v) for v in self.thumb_offset))
        setter("fixed_angles", tuple(float(v) for v in self.fixed_angles))
        setter("fixed_x", tuple(float(v) for v in self.fixed_x))
        setter("fixed_z", tuple(float(v) for v in self.fixed_z))
        setter("usb_hole_offset", tuple(float(v) for v in self.usb_hole_offset))
        setter("trrs_hole_offset", tuple(float(v) for v in self.trrs_hole_offset))

        locations = []
        for location in self.screw_insert_locations:
            try:
                column, row, offset = location
                column, row = int(column), int(row)
                offset = tuple(float(v) for v in offset)
            except (TypeError, ValueError) as e:
                raise ConfigurationError("screw insert location {!r} is not [column, row, [dx, dy]]".format(location)) from e
            locations.append((column, row, offset))
        setter("screw_insert_locations", tuple(locations))

    def _validate(self):
        if self.rows < 3 or self.columns < 3:
            raise ConfigurationError("the grid needs at least 3 rows and 3 columns, got {}x{}".format(self.rows, self.columns))
        if not 0 <= self.center_row < self.rows:
            raise ConfigurationError("center_row {} is outside 0..{}".format(self.center_row, self.lastrow))
        if not 0 <= self.center_col < self.columns:
            raise ConfigurationError("center_col {} is outside 0..{}".format(self.center_col, self.lastcol))

        for name in ("row_curvature", "column_curvature"):
            # sin(angle / 2) only vanishes off zero at multiples of 2*pi, where the flat guard does not apply
            if abs(getattr(self, name)) >= math.pi:
                raise ConfigurationError("{} must lie strictly between -pi and pi".format(name))

        if self.column_style not in COLUMN_STYLES:
            raise ConfigurationError("unknown column_style {!r}, expected one of {}".format(self.column_style, COLUMN_STYLES))
        if self.column_style == "fixed":
            for name in ("fixed_angles", "fixed_x", "fixed_z"):
                if len(getattr(self, name)) < self.columns:
                    raise ConfigurationError("{} has no entry for column {}".format(name, len(getattr(self, name))))

        if len(self.column_offsets) < self.columns:
            raise ConfigurationError("column_offsets has no entry for column {}".format(len(self.column_offsets)))
        if any(len(offset) != 3 for offset in self.column_offsets):
            raise ConfigurationError("every column offset must be a 3D vector")
        if len(self.thumb_offset) != 3:
            raise ConfigurationError("thumb_offset must be a 3D vector")
        if len(self.usb_hole_offset) != 2:
            raise ConfigurationError("usb_hole_offset must be a 2D vector")
        if len(self.trrs_hole_offset) != 3:
            raise ConfigurationError("trrs_hole_offset must be a 3D vector")

        # the thumb cluster hangs off the column left of the run, the right wall off the column right of it
        short = self.short_row_columns
        if (
            not short
            or short[0] < 1
            or list(short) != list(range(short[0], short[-1] + 1))
            or short[-1] > self.columns - 2
        ):
            raise ConfigurationError(
                "lastrow_columns must be a run of consecutive columns between column 1 "
                "and the second to last column, got {}".format(short)
            )

        for column, row, offset in self.screw_inserts:
            if not (0 <= column < self.columns and 0 <= row < self.rows):
                raise ConfigurationError("screw insert at ({}, {}) is outside the grid".format(column, row))
            if len(offset) != 2:
                raise ConfigurationError("screw insert offsets are [dx, dy]")

        if self.resolution < 3:
            raise ConfigurationError("resolution must be at least 3 segments")

    # derived values

    @property
    def lastrow(self) -> int:
        return self.rows - 1

    @property
    def cornerrow(self) -> int:
        return self.lastrow - 1

    @property
    def lastcol(self) -> int:
        return self.columns - 1

    @property
    def short_row_columns(self) -> Tuple[int, ...]:
        """
        Columns that hold a key on the last row.
        """
        if self.lastrow_columns is not None:
            return self.lastrow_columns
        return tuple(range(min(2, self.columns - 2), min(3, self.columns - 2) + 1))

    @property
    def reduced_inner_cols(self) -> int:
        return self.short_row_columns[0]

    @property
    def reduced_outer_cols(self) -> int:
        return self.lastcol - self.short_row_columns[-1]

    @property
    def mount_width(self) -> float:
        return self.keyswitch_width + 2 * self.plate_rim

    @property
    def mount_height(self) -> float:
        return self.keyswitch_height + 2 * self.plate_rim

    @property
    def row_pitch(self) -> float:
        return self.mount_height + self.extra_height

    @property
    def column_pitch(self) -> float:
        return self.mount_width + self.extra_width

    @property
    def cap_top_height(self) -> float:
        return self.plate_thickness + self.sa_profile_key_height

    @property
    def row_radius(self) -> Optional[float]:
        """
        Radius of the arc each column's keys lie on, None when the rows are flat.
        """
        return _radius(self.row_pitch, self.row_curvature, self.cap_top_height)

    @property
    def column_radius(self) -> Optional[float]:
        return _radius(self.column_pitch, self.column_curvature, self.cap_top_height)

    @property
    def column_x_delta(self) -> float:
        if self.column_radius is None:
            return -1 - self.column_pitch
        return -1 - self.column_radius * math.sin(self.column_curvature)

    @property
    def post_adj(self) -> float:
        return self.post_size / 2

    @property
    def double_plate_height(self) -> float:
        return (.95 * self.sa_double_length - self.mount_height) / 3

    @property
    def screw_inserts(self) -> Tuple[Tuple[int, int, Tuple[float, float]], ...]:
        """
        Screw insert locations with negative indices resolved against the grid.
        """
        return tuple(
            (column + self.columns if column < 0 else column, row + self.rows if row < 0 else row, offset)
            for column, row, offset in self.screw_insert_locations
        )

    def column_offset(self, column: int) -> Vector3:
        return self.column_offsets[column]

    def has_key(self, column: int, row: int) -> bool:
        """
        Whether (column, row) holds a key: inside the grid, and on the last row only for the short-row columns.
        """
        if not (0 <= column < self.columns and 0 <= row < self.rows):
            return False
        return row != self.lastrow or column in self.short_row_columns


def _radius(pitch: float, angle: float, cap_top_height: float) -> Optional[float]:
    half_sin = math.sin(angle / 2)
    if half_sin == 0:
        return None
    return (pitch / 2) / half_sin + cap_top_height


DEFAULT_CONFIG = KeyboardConfig()
shape_config: Dict[str, Any] = dataclasses.asdict(DEFAULT_CONFIG)


def config_from_dict(data: Dict[str, Any]) -> KeyboardConfig:
    known = {field.name for field in dataclasses.fields(KeyboardConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError("unknown configuration keys: {}".format(", ".join(unknown)))
    try:
        return KeyboardConfig(**data)
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(str(e)) from e


def load_config(path: pathlib.Path) -> KeyboardConfig:
    logging.info("Loading configuration from %s", path)
    with open(path, mode="rt", encoding="utf-8") as fid:
        try:
            data = json.load(fid)
        except json.JSONDecodeError as e:
            raise ConfigurationError("{} is not valid JSON: {}".format(path, e)) from e
    if not isinstance(data, dict):
        raise ConfigurationError("{} does not hold a JSON object".format(path))
    return config_from_dict(data)


def save_config(path: pathlib.Path, config: KeyboardConfig = DEFAULT_CONFIG):
    logging.info("Writing configuration to %s", path)
    with open(path, mode="wt", encoding="utf-8") as fid:
        json.dump(dataclasses.asdict(config), fid, indent=4)


class GenerateConfigAction(argparse.Action):
    """
    Write the default configuration to the given file and exit.
    """

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'type': pathlib.Path,
            'metavar': 'FILE',
            'help': "Write the default configuration to FILE and exit."
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser: argparse.ArgumentParser, namespace: argparse.Namespace, values: pathlib.Path, _option_string: Optional[str] = None):
        save_config(values)
        parser.exit()

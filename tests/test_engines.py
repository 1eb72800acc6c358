import json
import math

import pytest

from dactyl_csg.configuration import DEFAULT_CONFIG
from dactyl_csg.engines.csg_engine import geometry_engine as ge
from dactyl_csg.engines.engine import render
from dactyl_csg.parts import sa_cap, single_plate
from dactyl_csg.peripherals import screw_insert_outers, trrs_hole
from dactyl_csg.walls import case_walls_plate_outline


def test_csg_render_rebuilds_the_same_tree():
    for shape in (single_plate(DEFAULT_CONFIG), sa_cap(DEFAULT_CONFIG, 1.5), trrs_hole(DEFAULT_CONFIG),
                  screw_insert_outers(DEFAULT_CONFIG)):
        assert render(shape, ge) == shape


def test_render_drops_empty_unions():
    box = ge.box(1, 1, 1)
    assert render(ge.union([box, ge.union([])]), ge) == ge.union([box])


def test_csg_json_export(tmp_path):
    shape = ge.translate(ge.box(1, 2, 3), (1, 0, 0))
    exporter, = ge.exporters()
    path = tmp_path / ("box" + exporter.file_type())
    exporter.export_geometry(shape, path)
    with open(path, encoding="utf-8") as fid:
        assert json.load(fid) == {
            "transform": "translate",
            "vector": [1.0, 0.0, 0.0],
            "child": {"primitive": "box", "size": [1.0, 2.0, 3.0]},
        }


def test_keycap_sizes():
    for usize in (1, 1.5, 2):
        assert sa_cap(DEFAULT_CONFIG, usize).kind == "translate"
    with pytest.raises(ValueError):
        sa_cap(DEFAULT_CONFIG, 3)


def test_solid_engine_renders_openscad():
    solid = pytest.importorskip("solid")
    from dactyl_csg.engines.solid_engine import SolidEngine

    engine = SolidEngine()
    source = solid.scad_render(render(single_plate(DEFAULT_CONFIG), engine))
    assert "hull" in source
    assert "mirror" in source
    assert "difference" in source

    source = solid.scad_render(render(case_walls_plate_outline(DEFAULT_CONFIG, 1.0), engine))
    assert "projection" in source
    assert "linear_extrude" in source


def test_solid_engine_exports_scad(tmp_path):
    pytest.importorskip("solid")
    from dactyl_csg.engines.solid_engine import SolidEngine

    engine = SolidEngine()
    exporter, = engine.exporters()
    path = tmp_path / ("cap" + exporter.file_type())
    exporter.export_geometry(render(sa_cap(DEFAULT_CONFIG), engine), path)
    assert path.suffix == ".scad"
    assert "hull" in path.read_text()


def test_cadquery_engine_primitives():
    pytest.importorskip("cadquery")
    from dactyl_csg.engines.cadquery_engine import CadQueryEngine

    engine = CadQueryEngine()
    box = render(ge.box(2, 3, 4), engine)
    assert box.Volume() == pytest.approx(24)

    cylinder = render(ge.cylinder(1, 4), engine).BoundingBox()
    assert cylinder.zmin == pytest.approx(-2, abs=1e-2)
    assert cylinder.zmax == pytest.approx(2, abs=1e-2)


def test_cadquery_engine_hull_and_projection():
    pytest.importorskip("cadquery")
    from dactyl_csg.engines.cadquery_engine import CadQueryEngine

    engine = CadQueryEngine()
    pair = ge.convex_hull([ge.box(2, 3, 4), ge.translate(ge.box(2, 3, 4), (5, 0, 0))])
    bb = render(pair, engine).BoundingBox()
    assert bb.xmin == pytest.approx(-1, abs=1e-2)
    assert bb.xmax == pytest.approx(6, abs=1e-2)

    footprint = render(ge.project(ge.box(2, 3, 4), 0.5, cut=True), engine).BoundingBox()
    assert footprint.zmin == pytest.approx(0, abs=1e-2)
    assert footprint.zmax == pytest.approx(0.5, abs=1e-2)
    assert footprint.ymax == pytest.approx(1.5, abs=1e-2)


def test_cadquery_projection_keeps_separate_solids_apart():
    pytest.importorskip("cadquery")
    from dactyl_csg.engines.cadquery_engine import CadQueryEngine

    engine = CadQueryEngine()
    pair = ge.union([ge.box(2, 2, 2), ge.translate(ge.box(2, 2, 2), (10, 0, 0))])
    footprint = render(ge.project(pair, 1.0), engine)
    assert len(footprint.Solids()) == 2
    assert footprint.Volume() == pytest.approx(8, rel=1e-3)


def test_cadquery_cut_projection_is_the_section_at_the_ground():
    pytest.importorskip("cadquery")
    from dactyl_csg.engines.cadquery_engine import CadQueryEngine

    engine = CadQueryEngine()
    radius = DEFAULT_CONFIG.screw_insert_bottom_radius + DEFAULT_CONFIG.screw_insert_wall
    rims = render(ge.project(screw_insert_outers(DEFAULT_CONFIG), 1.0, cut=True), engine)
    assert len(rims.Solids()) == len(DEFAULT_CONFIG.screw_insert_locations)
    assert rims.Volume() == pytest.approx(len(DEFAULT_CONFIG.screw_insert_locations) * math.pi * radius ** 2, rel=1e-2)

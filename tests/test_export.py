"""Tests for mesh export of stand scenes."""
import numpy as np
import pytest
import trimesh

from stand_engine.contracts import StandType
from stand_engine.export import (
    export_scene,
    primitive_to_mesh,
    scene_meshes,
    scene_to_trimesh,
)
from stand_engine.geometry import Primitive, build_scene


class TestPrimitiveMeshes:

    def test_box_mesh_matches_primitive(self):
        p = Primitive(name="shelf_0", kind="shelf", shape="box",
                      size=(15.0, 30.0, 2.0), center=(0.0, 0.0, 1.0))
        mesh = primitive_to_mesh(p)
        assert mesh.is_watertight
        np.testing.assert_allclose(mesh.bounds, [[-7.5, -15.0, 0.0], [7.5, 15.0, 2.0]])
        assert mesh.metadata["name"] == "shelf_0"
        assert mesh.metadata["kind"] == "shelf"

    def test_scene_rotation_applies(self):
        p = Primitive(name="b", kind="panel", shape="box",
                      size=(2.0, 4.0, 6.0), center=(0.0, 0.0, 3.0))
        mesh = primitive_to_mesh(p, rotation_z_deg=90.0)
        np.testing.assert_allclose(mesh.extents, [4.0, 2.0, 6.0], atol=1e-9)

    def test_bracket_cylinder_lies_along_y(self):
        p = Primitive(name="bracket_0", kind="bracket", shape="cylinder",
                      size=(4.0, 4.0, 0.5), center=(0.0, -15.5, 24.0), axis="y")
        mesh = primitive_to_mesh(p)
        np.testing.assert_allclose(mesh.extents, [4.0, 0.5, 4.0], atol=1e-9)
        np.testing.assert_allclose(mesh.bounds.mean(axis=0), [0.0, -15.5, 24.0], atol=1e-9)


class TestSceneMeshes:

    def test_shell_skipped_by_default(self, spec_a):
        scene = build_scene(spec_a)
        names = [name for name, _ in scene_meshes(scene)]
        assert "stand_shell" not in names
        assert len(names) == len(scene.primitives) - 1

    def test_shell_on_request(self, spec_a):
        scene = build_scene(spec_a)
        names = [name for name, _ in scene_meshes(scene, include_shell=True)]
        assert names[0] == "stand_shell"

    def test_trimesh_scene_has_named_nodes(self, spec_a):
        tm_scene = scene_to_trimesh(build_scene(spec_a))
        assert len(tm_scene.geometry) == 16
        assert "product_0_0_0" in tm_scene.graph.nodes

    def test_corner_stand_is_rotated(self, spec_a, with_type):
        scene = build_scene(with_type(spec_a, StandType.CORNER))
        (_, shelf_mesh), = [(n, m) for n, m in scene_meshes(scene) if n == "shelf_0"]
        # a 15 x 30 board turned 45 degrees spans (15 + 30) / sqrt(2) in x
        assert shelf_mesh.extents[0] == pytest.approx(45.0 / np.sqrt(2.0))


class TestExportScene:

    def test_stl_round_trip_bounds(self, spec_a, tmp_path):
        out = export_scene(build_scene(spec_a), tmp_path / "model.stl")
        assert out.exists()
        mesh = trimesh.load(str(out))
        np.testing.assert_allclose(mesh.bounds, [[-7.5, -15.0, 0.0], [7.5, 15.0, 30.0]], atol=1e-4)

    def test_glb_written(self, two_column_spec, tmp_path):
        out = export_scene(build_scene(two_column_spec), tmp_path / "nested" / "model.glb")
        data = out.read_bytes()
        assert data[:4] == b"glTF"

    def test_obj_written(self, spec_b, tmp_path):
        out = export_scene(build_scene(spec_b), tmp_path / "model.obj")
        assert out.read_text(encoding="utf-8").count("\nv ") > 0

    def test_unsupported_format(self, spec_a, tmp_path):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_scene(build_scene(spec_a), tmp_path / "model.step")

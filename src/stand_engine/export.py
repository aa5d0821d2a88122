"""
Mesh export for stand scenes.

Converts a SceneGraph into trimesh geometry (one named node per primitive) and
writes interchange files. GLB keeps the node structure; STL, OBJ and PLY get a
single concatenated mesh.
"""

import logging
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import trimesh
from trimesh.transformations import rotation_matrix, translation_matrix

from .geometry import Primitive, SceneGraph

logger = logging.getLogger(__name__)

SCENE_FORMATS = ("glb",)
MESH_FORMATS = ("stl", "obj", "ply")
CYLINDER_SECTIONS = 48


def primitive_transform(primitive: Primitive, rotation_z_deg: float = 0.0) -> np.ndarray:
    """4x4 placement of a primitive, including the scene-level z rotation."""
    placement = translation_matrix(np.asarray(primitive.center, dtype=float))
    if primitive.shape == "cylinder" and primitive.axis == "y":
        placement = placement @ rotation_matrix(np.pi / 2.0, [1.0, 0.0, 0.0])
    if rotation_z_deg:
        placement = rotation_matrix(np.radians(rotation_z_deg), [0.0, 0.0, 1.0]) @ placement
    return placement


def primitive_to_mesh(primitive: Primitive, rotation_z_deg: float = 0.0) -> trimesh.Trimesh:
    transform = primitive_transform(primitive, rotation_z_deg)
    if primitive.shape == "cylinder":
        mesh = trimesh.creation.cylinder(
            radius=primitive.size[0] / 2.0,
            height=primitive.size[2],
            sections=CYLINDER_SECTIONS,
        )
    else:
        mesh = trimesh.creation.box(extents=list(primitive.size))
    mesh.apply_transform(transform)
    mesh.metadata["name"] = primitive.name
    mesh.metadata["kind"] = primitive.kind
    return mesh


def scene_meshes(
    scene: SceneGraph, include_shell: bool = False
) -> List[Tuple[str, trimesh.Trimesh]]:
    """Named meshes in primitive order. The envelope is skipped unless asked for."""
    meshes = []
    for primitive in scene.primitives:
        if primitive.kind == "shell" and not include_shell:
            continue
        meshes.append((primitive.name, primitive_to_mesh(primitive, scene.rotation_z_deg)))
    return meshes


def scene_to_trimesh(scene: SceneGraph, include_shell: bool = False) -> trimesh.Scene:
    tm_scene = trimesh.Scene()
    for name, mesh in scene_meshes(scene, include_shell):
        tm_scene.add_geometry(mesh, node_name=name, geom_name=name)
    return tm_scene


def export_scene(
    scene: SceneGraph,
    path: Union[str, Path],
    include_shell: bool = False,
) -> Path:
    """Write ``scene`` to ``path``; the format comes from the file suffix.

    Raises:
        ValueError: If the suffix is not a supported format.
    """
    out = Path(path)
    file_type = out.suffix.lower().lstrip(".")
    if file_type not in SCENE_FORMATS + MESH_FORMATS:
        raise ValueError(
            f"Unsupported export format {out.suffix!r}; "
            f"expected one of {SCENE_FORMATS + MESH_FORMATS}"
        )
    out.parent.mkdir(parents=True, exist_ok=True)

    if file_type in SCENE_FORMATS:
        data = scene_to_trimesh(scene, include_shell).export(file_type=file_type)
    else:
        meshes = [mesh for _, mesh in scene_meshes(scene, include_shell)]
        data = trimesh.util.concatenate(meshes).export(file_type=file_type)

    if isinstance(data, str):
        out.write_text(data, encoding="utf-8")
    else:
        out.write_bytes(data)
    logger.info("Exported %s: %s", file_type.upper(), out)
    return out

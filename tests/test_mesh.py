"""
Tests for TetMesh validation/export and the geometric predicates.
"""
import numpy as np
import pytest
from scipy.spatial import ConvexHull

from pdt3d.mesh import TetMesh
from pdt3d.pipeline import compute_delaunay
from pdt3d.predicates import affine_rank, insphere, is_degenerate, orient3d, tet_volumes


def clean(report):
    return not any(report[k] for k in ("bad_index", "bad_orientation",
                                       "bad_face_multiplicity", "bad_neighbors"))


# ---------------- predicates ----------------

def test_orient3d_sign():
    a, b, c, d = (0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)
    assert orient3d(a, b, c, d) > 0
    assert orient3d(b, a, c, d) < 0
    assert orient3d(a, b, c, (0.3, 0.3, 0)) == 0


def test_insphere_sign():
    a, b, c, d = (0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)
    inside, outside = (0.5, 0.5, 0.5), np.array([2.0, 2.0, 2.0])
    assert insphere(a, b, c, d, inside) > 0
    assert insphere(a, b, c, d, outside) < 0
    # орієнтація не впливає на знак
    assert insphere(b, a, c, d, inside) > 0
    assert insphere(b, a, c, d, outside) < 0


def test_tet_volumes_signed():
    unit = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]
    flipped = [unit[1], unit[0], unit[2], unit[3]]
    vols = tet_volumes([unit, flipped])
    assert vols.shape == (2,)
    assert vols[0] == pytest.approx(1 / 6)
    assert vols[1] == pytest.approx(-1 / 6)
    assert vols[0] == pytest.approx(orient3d(*unit) / 6)


def test_affine_rank():
    assert affine_rank(np.zeros((5, 3))) == 0
    assert affine_rank([[0, 0, 0], [1, 1, 1], [2, 2, 2]]) == 1
    assert affine_rank([[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]]) == 2
    assert affine_rank([[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]]) == 3
    assert affine_rank(np.empty((0, 3))) == 0


def test_is_degenerate(simplex_points, coplanar_points):
    assert not is_degenerate(simplex_points)
    assert is_degenerate(coplanar_points)
    assert is_degenerate(simplex_points[:9])


# ---------------- bounded mesh ----------------

@pytest.fixture
def bounded(random_points):
    pts = random_points(25, seed=31)
    cells = compute_delaunay(pts, 25, False)
    return pts, TetMesh.from_cells(pts, cells)


def test_bounded_mesh_valid(bounded):
    _, mesh = bounded
    report = mesh.validate()
    assert report["tets"] == len(mesh.tets) > 0
    assert clean(report)


def test_bounded_mesh_is_delaunay(bounded):
    _, mesh = bounded
    assert mesh.check_empty_sphere() == []


def test_boundary_is_convex_hull(bounded):
    pts, mesh = bounded
    hull = {tuple(sorted(int(v) for v in f)) for f in ConvexHull(pts).simplices}
    assert set(mesh.extract_boundary_faces()) == hull


def test_neighbors_linked(bounded):
    _, mesh = bounded
    for tid in range(len(mesh.tets)):
        for nb in mesh.neighbors(tid):
            if nb != -1:
                assert tid in mesh.neighbors(nb)


def test_validate_flags_bad_index():
    pts = [(0.1, 0.1, 0.1), (0.9, 0.1, 0.1), (0.1, 0.9, 0.1), (0.1, 0.1, 0.9)]
    report = TetMesh.from_cells(pts, [(0, 1, 2, 9), (0, 1, 1, 2)]).validate()
    assert report["bad_index"] == [0, 1]


def test_validate_flags_flat_tet():
    pts = [(0.1, 0.1, 0.5), (0.9, 0.1, 0.5), (0.1, 0.9, 0.5), (0.5, 0.5, 0.5)]
    report = TetMesh.from_cells(pts, [(0, 1, 2, 3)]).validate()
    assert report["bad_orientation"] == [0]


# ---------------- periodic mesh ----------------

def test_periodic_mesh_closed(random_points):
    pts = random_points(64, seed=32)
    cells = compute_delaunay(pts, 64, True)
    mesh = TetMesh.from_cells(pts, cells, periodic=True)
    assert mesh.extract_boundary_faces() == []
    assert clean(mesh.validate())


def test_periodic_mesh_has_no_empty_sphere_check():
    mesh = TetMesh([], periodic=True)
    with pytest.raises(ValueError):
        mesh.check_empty_sphere()


# ---------------- export ----------------

def test_vtk_export(simplex_points, tmp_path):
    pts = simplex_points.reshape(-1, 3)
    mesh = TetMesh.from_cells(pts, compute_delaunay(pts, 4, False))
    text = mesh.to_vtk()
    assert text.startswith("# vtk DataFile Version 3.0")
    assert "POINTS 4 double" in text
    assert "CELLS 1 5" in text
    assert text.rstrip().splitlines()[-1] == "10"

    path = tmp_path / "volume.vtk"
    mesh.write_vtk(str(path))
    assert path.read_text(encoding="utf-8") == text


def test_boundary_off(simplex_points, tmp_path):
    pts = simplex_points.reshape(-1, 3)
    mesh = TetMesh.from_cells(pts, compute_delaunay(pts, 4, False))
    lines = mesh.boundary_off().splitlines()
    assert lines[0] == "OFF"
    assert lines[1] == "4 4 0"
    assert sum(1 for l in lines if l.startswith("3 ")) == 4

    path = tmp_path / "boundary.off"
    mesh.write_boundary_off(str(path))
    assert path.read_text(encoding="utf-8").startswith("OFF")

# examples/main.py
from __future__ import annotations

import logging

import numpy as np

from pdt3d.geom import normalize_coords
from pdt3d.mesh import TetMesh
from pdt3d.pipeline import compute_delaunay


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # --- 1) Вхідні дані: випадкові точки, частина — за межами [0,1) ---
    rng = np.random.default_rng(7)
    points = rng.uniform(-0.5, 1.5, size=(40, 3))
    n = points.shape[0]
    wrapped = normalize_coords(points, n).reshape(-1, 3)

    # --- 2) Звичайна Делоне ---
    tets = compute_delaunay(points, n, is_periodic=False)
    if tets is None:
        print("Рушій не впорався (bounded).")
        return
    mesh = TetMesh.from_cells(wrapped, tets)
    print(f"Тетраедрів (bounded):  {len(tets)}")
    print("VALIDATION:", mesh.validate())
    print("Порушень порожньої сфери:", len(mesh.check_empty_sphere()))

    mesh.write_boundary_off("boundary.off")
    mesh.write_vtk("volume.vtk")
    print("boundary.off, volume.vtk записано.")

    # --- 3) Періодична Делоне (3-тор) ---
    tets = compute_delaunay(points, n, is_periodic=True)
    if tets is None:
        print("Рушій не впорався (periodic).")
        return
    mesh = TetMesh.from_cells(wrapped, tets, periodic=True)
    print(f"Тетраедрів (periodic): {len(tets)}")
    print("VALIDATION:", mesh.validate())


if __name__ == "__main__":
    main()

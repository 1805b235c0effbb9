"""
python -m pdt3d POINTS [--periodic] [--off PATH] [--vtk PATH] [--validate] [-v]

Читає точки (x y z на рядок), друкує тетри як 'i j k l'.
Код виходу: 0 — успіх, 1 — помилка рушія, 2 — некоректний вхід.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .errors import InvalidInputError
from .geom import normalize_coords
from .io import format_cells, read_points
from .mesh import TetMesh
from .pipeline import compute_delaunay

logger = logging.getLogger("pdt3d")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pdt3d", description="3D (periodic) Delaunay tetrahedralization")
    p.add_argument("points", help="text file with one 'x y z' point per line")
    p.add_argument("--periodic", action="store_true", help="triangulate on the unit 3-torus")
    p.add_argument("--off", metavar="PATH", help="write the boundary surface as OFF")
    p.add_argument("--vtk", metavar="PATH", help="write the tetrahedra as legacy VTK")
    p.add_argument("--validate", action="store_true", help="print a mesh validation report")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        pts = read_points(args.points)
        cells = compute_delaunay(pts, pts.shape[0], args.periodic)
    except (OSError, InvalidInputError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    if cells is None:
        print("error: triangulation failed (see log)", file=sys.stderr)
        return 1

    print(format_cells(cells))

    if args.off or args.vtk or args.validate:
        # сітка на нормалізованих координатах — тих, що бачив рушій
        mesh = TetMesh.from_cells(
            normalize_coords(pts, pts.shape[0]).reshape(-1, 3), cells, periodic=args.periodic
        )
        if args.validate:
            print(f"VALIDATION: {mesh.validate()}", file=sys.stderr)
        if args.off:
            mesh.write_boundary_off(args.off)
            logger.info(f"{args.off} written.")
        if args.vtk:
            mesh.write_vtk(args.vtk)
            logger.info(f"{args.vtk} written.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

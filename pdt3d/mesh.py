# pdt3d/mesh.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .geom import EPS
from .predicates import orient3d, insphere

FaceKey = Tuple[int, int, int]  # відсортована трійка вершин грані

@dataclass
class Tet:
    """
    Тетраедр у сітці.
    v[i] — вершина, протилежна грані i. Отже, грань i містить три вершини v[(i+1)%4], v[(i+2)%4], v[(i+3)%4].
    nbr[i] — сусід через грань i (індекс тетра, або -1 якщо межа).
    """
    v: Tuple[int, int, int, int]
    nbr: List[int] = field(default_factory=lambda: [-1, -1, -1, -1])

    def face_vertices(self, i: int) -> Tuple[int, int, int]:
        a, b, c, d = self.v
        if i == 0: return (b, c, d)
        if i == 1: return (a, c, d)
        if i == 2: return (a, b, d)
        return (a, b, c)

class TetMesh:
    """
    Тетра-сітка, зібрана з результату compute_delaunay (для перевірки й експорту):
      - points: (N,3) float64 (нормалізовані координати)
      - tets: масив Tet у порядку тетрів рушія; вершини не переставляються
      - facemap: sorted(face) -> [(tet_id, local_face_idx), ...]
    У періодичному режимі межі немає: кожна грань має рівно 2 тетри.
    """
    def __init__(self, points, periodic: bool = False):
        self.points: np.ndarray = np.array(points, dtype=np.float64).reshape(-1, 3)
        self.periodic = periodic
        self.tets: List[Tet] = []
        self.facemap: Dict[FaceKey, List[Tuple[int, int]]] = {}

    @classmethod
    def from_cells(cls, points, cells: Iterable[Sequence[int]], periodic: bool = False) -> "TetMesh":
        """points — (N,3)-масив або список трійок. Додати всі тетри і зшити сусідів через facemap."""
        mesh = cls(points, periodic=periodic)
        for (i0, i1, i2, i3) in cells:
            mesh.add_tet(i0, i1, i2, i3)
        for lst in mesh.facemap.values():
            if len(lst) == 2:
                (t1, f1), (t2, f2) = lst
                mesh.link(t1, f1, t2, f2)
        return mesh

    def add_tet(self, v0: int, v1: int, v2: int, v3: int) -> int:
        tid = len(self.tets)
        t = Tet((int(v0), int(v1), int(v2), int(v3)))
        self.tets.append(t)
        for i in range(4):
            key = tuple(sorted(t.face_vertices(i)))
            self.facemap.setdefault(key, []).append((tid, i))
        return tid

    def link(self, ta: int, fa: int, tb: int, fb: int) -> None:
        self.tets[ta].nbr[fa] = tb
        self.tets[tb].nbr[fb] = ta

    def neighbors(self, tid: int) -> List[int]:
        return self.tets[tid].nbr[:]

    def extract_boundary_faces(self) -> List[Tuple[int, int, int]]:
        """Повертає всі граничні трикутники (face має рівно 1 інцидентний тет)."""
        return [key for key, lst in self.facemap.items() if len(lst) == 1]

    # ---------- валідація сітки ----------
    def validate(self) -> dict:
        """
        Перевірка результату тетраедралізації:
          - індекси в [0, N) і без повторів у межах тетри;
          - (обмежений режим) жодної тетри нульового об'єму;
          - гранична грань має 1 тет, внутрішня — 2 (періодичний режим: завжди 2);
          - сусідства симетричні.
        Повертає словник з діагностикою (порожні списки = все ок).
        """
        n = len(self.points)
        bad_index: List[int] = []
        bad_orientation: List[int] = []
        bad_face_multiplicity: List[Tuple[FaceKey, int]] = []
        bad_neighbors: List[Tuple[int, int, str]] = []

        for tid, t in enumerate(self.tets):
            if any(not 0 <= v < n for v in t.v) or len(set(t.v)) != 4:
                bad_index.append(tid)
                continue
            if not self.periodic:
                a, b, c, d = (self.points[v] for v in t.v)
                if abs(orient3d(a, b, c, d)) <= EPS:
                    bad_orientation.append(tid)

        allowed = (2,) if self.periodic else (1, 2)
        for key, lst in self.facemap.items():
            if len(lst) not in allowed:
                bad_face_multiplicity.append((key, len(lst)))

        for tid, t in enumerate(self.tets):
            for fi in range(4):
                nb = t.nbr[fi]
                if nb == -1:
                    continue
                key = tuple(sorted(t.face_vertices(fi)))
                nb_t = self.tets[nb]
                if not any(tuple(sorted(nb_t.face_vertices(fj))) == key and nb_t.nbr[fj] == tid
                           for fj in range(4)):
                    bad_neighbors.append((tid, fi, f"no_backlink_to_{nb}"))

        return {
            "tets": len(self.tets),
            "bad_index": bad_index,
            "bad_orientation": bad_orientation,
            "bad_face_multiplicity": bad_face_multiplicity,
            "bad_neighbors": bad_neighbors,
        }

    def check_empty_sphere(self, eps: float = EPS) -> List[Tuple[int, int]]:
        """
        Перебором: пари (tet, point), де point строго всередині описаної сфери tet.
        Тільки для обмеженого режиму і невеликих наборів — O(T*N).
        """
        if self.periodic:
            raise ValueError("empty-sphere check is only defined for the bounded mode")
        bad: List[Tuple[int, int]] = []
        for tid, t in enumerate(self.tets):
            a, b, c, d = (self.points[v] for v in t.v)
            for pi, p in enumerate(self.points):
                if pi in t.v:
                    continue
                if insphere(a, b, c, d, p) > eps:
                    bad.append((tid, pi))
        return bad

    # ---------- OFF-експорт граничної поверхні ----------
    def boundary_off(self) -> str:
        """
        Повертає OFF для граничної поверхні сітки (faces з кратністю 1).
        """
        bfaces = self.extract_boundary_faces()
        used = sorted({v for tri in bfaces for v in tri})
        remap = {old: i for i, old in enumerate(used)}

        lines = ["OFF", f"{len(used)} {len(bfaces)} 0"]
        for vi in used:
            p = self.points[vi]
            lines.append(f"{p[0]} {p[1]} {p[2]}")
        for tri in bfaces:
            a, b, c = (remap[tri[0]], remap[tri[1]], remap[tri[2]])
            lines.append(f"3 {a} {b} {c}")

        return "\n".join(lines)

    def write_boundary_off(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.boundary_off())

    # ---------- VTK (legacy ASCII, unstructured grid) ----------
    def to_vtk(self, title: str = "pdt3d tetrahedralization") -> str:
        lines = ["# vtk DataFile Version 3.0", title, "ASCII", "DATASET UNSTRUCTURED_GRID"]
        lines.append(f"POINTS {len(self.points)} double")
        for p in self.points:
            lines.append(f"{p[0]} {p[1]} {p[2]}")
        lines.append(f"CELLS {len(self.tets)} {5 * len(self.tets)}")
        for t in self.tets:
            lines.append("4 " + " ".join(str(v) for v in t.v))
        lines.append(f"CELL_TYPES {len(self.tets)}")
        lines.extend("10" for _ in self.tets)  # VTK_TETRA
        return "\n".join(lines) + "\n"

    def write_vtk(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.to_vtk())

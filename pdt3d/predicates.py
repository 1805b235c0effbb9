# pdt3d/predicates.py
from __future__ import annotations

import numpy as np

from .geom import EPS


def _xyz(p) -> np.ndarray:
    return np.asarray(p, dtype=np.float64).reshape(3)

def orient3d(a, b, c, d) -> float:
    """(b-a) x (c-a) · (d-a): >0 — позитивна орієнтація, 0 — копланарні."""
    a = _xyz(a)
    return float(np.dot(np.cross(_xyz(b) - a, _xyz(c) - a), _xyz(d) - a))

def insphere(a, b, c, d, e) -> float:
    """
    Знак тесту «чи всередині сфери, що проходить через a,b,c,d, лежить e?».
    Повертає:
      >0  якщо e всередині circumsphere(a,b,c,d),
      <0  якщо зовні,
       0  якщо на сфері або a,b,c,d копланарні.
    """
    e = _xyz(e)
    rows = []
    for p in (a, b, c, d):
        r = _xyz(p) - e
        rows.append([r[0], r[1], r[2], float(np.dot(r, r))])
    val = float(np.linalg.det(np.array(rows)))
    ori = orient3d(a, b, c, d)
    # для точки всередині det має знак -orient3d
    if ori > 0:
        return -val
    elif ori < 0:
        return val
    return 0.0

def tet_volumes(corners) -> np.ndarray:
    """(T,4,3) координати вершин -> (T,) знакові об'єми тетрів."""
    q = np.asarray(corners, dtype=np.float64).reshape(-1, 4, 3)
    e1 = q[:, 1] - q[:, 0]
    e2 = q[:, 2] - q[:, 0]
    e3 = q[:, 3] - q[:, 0]
    return np.einsum("ij,ij->i", np.cross(e1, e2), e3) / 6.0

# ---------- виродженість набору точок ----------
def affine_rank(points, eps: float = EPS) -> int:
    """
    Розмірність афінної оболонки (N,3)-набору: 0 — одна точка (або всі збігаються),
    1 — колінеарні, 2 — копланарні, 3 — справжнє 3D.
    Допуск відносний до розкиду точок.
    """
    arr = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if arr.shape[0] < 2:
        return 0
    centered = arr - arr.mean(axis=0)
    sv = np.linalg.svd(centered, compute_uv=False)
    if sv[0] == 0.0:
        return 0
    return int(np.count_nonzero(sv > eps * max(1.0, sv[0])))

def is_degenerate(points, eps: float = EPS) -> bool:
    """Менше 4 точок або всі в одній площині/на прямій — 3D Делоне порожня."""
    arr = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return arr.shape[0] < 4 or affine_rank(arr, eps) < 3

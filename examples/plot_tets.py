# examples/plot_tets.py
from __future__ import annotations

import sys

import numpy as np

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401  # потрібен для 'projection="3d"'

from pdt3d.engine import PERIOD, PeriodicDelaunay3D, ensure_initialized
from pdt3d.geom import normalize_coords

EDGES = [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]


def plot_cells(ax, pts, handle):
    """
    Ребра тетраедрів. У періодичному режимі вершини зсуваються на cell_offset,
    тож тетри, що «перетинають» грань куба, малюються цілими.
    """
    for t in range(handle.nb_cells()):
        vs = []
        for k in range(4):
            p = pts[handle.cell_vertex(t, k)] + np.asarray(handle.cell_offset(t, k)) * np.asarray(PERIOD)
            vs.append(p)
        for a, b in EDGES:
            pa, pb = vs[a], vs[b]
            ax.plot([pa[0], pb[0]], [pa[1], pb[1]], [pa[2], pb[2]], linewidth=0.5)
    ax.scatter(pts[:, 0], pts[:, 1], pts[:, 2], s=6, color="black")
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")


def main(n: int = 30, out: str = "tets.png"):
    ensure_initialized()
    rng = np.random.default_rng(1)
    pts = normalize_coords(rng.random(3 * n), n).reshape(-1, 3)

    fig = plt.figure(figsize=(10, 5))
    for i, (title, period) in enumerate((("bounded", None), ("periodic", PERIOD)), start=1):
        ax = fig.add_subplot(1, 2, i, projection="3d")
        with PeriodicDelaunay3D(period) as handle:
            handle.set_stores_cicl(False)
            handle.set_vertices(n, pts.reshape(-1))
            handle.compute()
            plot_cells(ax, pts, handle)
            ax.set_title(f"{title}: {handle.nb_cells()} tets")
    fig.savefig(out, dpi=120)
    print(f"{out} записано.")


if __name__ == "__main__":
    main(int(sys.argv[1]) if len(sys.argv) > 1 else 30)

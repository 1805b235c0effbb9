from __future__ import annotations
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Tuple

import numpy as np

from .engine import PERIOD, PeriodicDelaunay3D, ensure_initialized
from .geom import normalize_coords

logger = logging.getLogger(__name__)

Cell = Tuple[int, int, int, int]


class CellComplexView(Protocol):
    """Те, що матеріалізатору треба від ручки: кількість тетрів і їхні вершини."""
    def nb_cells(self) -> int: ...
    def cell_vertex(self, cell: int, corner: int) -> int: ...


@dataclass(frozen=True)
class Fault:
    """Помилка рушія, перетворена на значення (не виняток)."""
    message: str
    exc_type: str


@dataclass(frozen=True)
class Outcome:
    """
    Результат драйвера:
      view       — ручка з результатом (жива лише всередині with-блоку), або None;
      fault      — Fault, якщо compute() впав;
      degenerate — compute() вдався, але тетрів 0 при >= 4 точках;
      nb_vertices — кількість вершин, яку повідомив рушій.
    """
    view: Optional[CellComplexView] = None
    fault: Optional[Fault] = None
    degenerate: bool = False
    nb_vertices: int = 0

    @property
    def ok(self) -> bool:
        return self.fault is None


@contextmanager
def triangulate(buffer: np.ndarray, count: int, periodic: bool) -> Iterator[Outcome]:
    """
    Драйвер тетраедралізації:
      - створює ручку потрібного режиму (періодичний — одиничний куб);
      - вимикає кругові списки інцидентних тетрів (нам не потрібні);
      - завантажує точки і один раз викликає compute();
      - будь-яку помилку compute() перетворює на Outcome з fault.
    Ручка закривається на будь-якому виході з with-блоку.
    """
    handle = PeriodicDelaunay3D(PERIOD) if periodic else PeriodicDelaunay3D(None)
    try:
        handle.set_stores_cicl(False)
        logger.debug(f"Delaunay object created. Periodic mode: {periodic}")
        logger.debug(f"Processing {count} points.")

        handle.set_vertices(count, buffer)
        nv = handle.nb_vertices()
        logger.debug(f"Vertices set. Actual vertex count: {nv}")
        if nv != count:
            logger.info(f"Engine merged coincident points: {count} requested, {nv} distinct.")

        fault = None
        try:
            handle.compute()
        except Exception as e:
            logger.error(f"Exception during compute: {type(e).__name__}: {e}")
            fault = Fault(str(e), type(e).__name__)
        if fault is not None:
            yield Outcome(fault=fault, nb_vertices=nv)
            return
        logger.debug("Delaunay computation successful.")

        n_cells = handle.nb_cells()
        logger.info(f"Found {n_cells} tetrahedra.")
        degenerate = n_cells == 0 and count >= 4
        if degenerate:
            logger.warning(
                f"No tetrahedra generated despite having {count} points; "
                "the point configuration is probably degenerate."
            )
        yield Outcome(view=handle, degenerate=degenerate, nb_vertices=nv)
    finally:
        handle.close()


def materialize(view: CellComplexView) -> List[Cell]:
    """
    Копіює тетри з ручки у список четвірок індексів.
    Порядок тетрів і вершин у тетрі — рівно такий, як повідомив рушій.
    """
    n = view.nb_cells()
    if n == 0:
        return []
    return [
        (
            int(view.cell_vertex(t, 0)),
            int(view.cell_vertex(t, 1)),
            int(view.cell_vertex(t, 2)),
            int(view.cell_vertex(t, 3)),
        )
        for t in range(n)
    ]


def compute_delaunay(points, num_points: int, is_periodic: bool) -> Optional[List[Cell]]:
    """
    Повний пайплайн: ініціалізація -> нормалізація -> тетраедралізація -> матеріалізація.

    points — плаский масив 3*num_points координат (або (N,3)), діапазон довільний.
    Повертає список четвірок індексів (може бути порожнім) або None, якщо рушій впав.
    Некоректна форма входу -> InvalidInputError.
    """
    ensure_initialized()
    logger.debug("Starting Delaunay computation...")

    buffer = normalize_coords(points, num_points)
    if num_points:
        head = buffer[: 3 * min(3, num_points)].reshape(-1, 3)
        logger.debug(f"First points: {head.tolist()}")

    with triangulate(buffer, num_points, bool(is_periodic)) as outcome:
        if not outcome.ok:
            return None
        return materialize(outcome.view)

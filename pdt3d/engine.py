"""
Рушій тетраедралізації: SciPy Delaunay (Qhull під капотом) + обгортка для
періодичного режиму (3-тор, одиничний куб).

  - ensure_initialized() — одноразова глобальна ініціалізація, потокобезпечна;
  - PeriodicDelaunay3D   — «ручка» одного обчислення: set_vertices -> compute ->
                           nb_cells / cell_vertex -> close.

Періодичний режим: точки копіюються в 27 зсувів {-1,0,1}^3, будується звичайна
Делоне, і тетри, що торкаються центральної копії, згортаються назад на
оригінальні індекси (кожен періодичний тетраедр — рівно один раз).
"""
from __future__ import annotations

import logging
import threading
from itertools import product
from typing import List, Optional, Sequence, Set, Tuple

import numpy as np

from .errors import EngineInitError, InvalidInputError, TriangulationError
from .predicates import is_degenerate, tet_volumes

logger = logging.getLogger(__name__)

PERIOD: Tuple[float, float, float] = (1.0, 1.0, 1.0)
QHULL_OPTIONS = "Qbb Qc Qz"  # ті ж, що SciPy бере за замовчуванням для 3D
JITTER = 1e-8      # амплітуда збурення базових точок, у частках періоду
JITTER_SEED = 0x5EED
COVER_RTOL = 1e-6  # допуск перевірки «тор покрито рівно один раз»
# центральна копія (0,0,0) іде першою, тож її індекси збігаються з вхідними
IMAGE_OFFSETS: Tuple[Tuple[int, int, int], ...] = ((0, 0, 0),) + tuple(
    o for o in product((-1, 0, 1), repeat=3) if o != (0, 0, 0)
)

_init_lock = threading.Lock()
_initialized = False


# ---------------- Глобальна ініціалізація ----------------
def ensure_initialized() -> None:
    """
    Ідемпотентна ініціалізація рушія. Перший виклик імпортує Qhull-біндинг і
    проганяє пробну тетраедралізацію одного симплекса; далі — лише перевірка прапорця.
    Якщо рушій не працює, кидаємо EngineInitError (фатально, прапорець не ставиться).
    """
    global _initialized
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        try:
            from scipy.spatial import Delaunay
            warmup = Delaunay(
                np.array([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)], dtype=np.float64),
                qhull_options=QHULL_OPTIONS,
            )
        except Exception as e:
            raise EngineInitError(f"geometry engine failed to initialize: {e}") from e
        if warmup.simplices.shape != (1, 4):
            raise EngineInitError(
                f"geometry engine self-check failed: expected 1 cell, got {warmup.simplices.shape[0]}"
            )
        _initialized = True
        logger.info("Geometry engine initialized.")


def is_initialized() -> bool:
    return _initialized


# ---------------- Ручка тетраедралізації ----------------
class PeriodicDelaunay3D:
    """
    Один екземпляр рушія. period=None — звичайна (обмежена) Делоне,
    period=(px,py,pz) — періодична Делоне на торі.

    Індекси в cell_vertex() завжди посилаються на порядок вхідних точок.
    Після close() усі аксесори кидають RuntimeError.
    """

    def __init__(self, period: Optional[Sequence[float]] = None):
        if period is not None:
            per = tuple(float(p) for p in period)
            if len(per) != 3 or any(not (p > 0.0) for p in per):
                raise InvalidInputError(f"period must be three positive numbers, got {period!r}")
            self._period: Optional[Tuple[float, float, float]] = per
        else:
            self._period = None
        self._stores_cicl = True
        self._points: Optional[np.ndarray] = np.empty((0, 3), dtype=np.float64)
        self._nb_vertices = 0
        self._cells: Optional[np.ndarray] = None
        self._offsets: Optional[np.ndarray] = None
        self._computed = False
        self._closed = False

    # ---- контекстний менеджер ----
    def __enter__(self) -> "PeriodicDelaunay3D":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Звільнити масиви. Повторний виклик — no-op."""
        self._points = None
        self._cells = None
        self._offsets = None
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("triangulation handle is closed")

    # ---- конфігурація ----
    @property
    def is_periodic(self) -> bool:
        return self._period is not None

    @property
    def period(self) -> Optional[Tuple[float, float, float]]:
        return self._period

    def set_stores_cicl(self, flag: bool) -> None:
        """Кругові списки інцидентних тетрів. Qhull їх не веде — прапорець лише запам'ятовуємо."""
        self._check_open()
        self._stores_cicl = bool(flag)

    def stores_cicl(self) -> bool:
        return self._stores_cicl

    def set_vertices(self, n: int, buffer) -> None:
        """Завантажити n точок із плаского буфера (3n float64)."""
        self._check_open()
        if n < 0:
            raise InvalidInputError(f"vertex count must be >= 0, got {n}")
        flat = np.asarray(buffer, dtype=np.float64).reshape(-1)
        if flat.size < 3 * n:
            raise InvalidInputError(f"buffer holds {flat.size} values, need {3 * n}")
        self._points = flat[:3 * n].reshape(n, 3).copy()
        # рушій рахує збіжні точки один раз
        self._nb_vertices = int(np.unique(self._points, axis=0).shape[0]) if n else 0
        self._cells = None
        self._offsets = None
        self._computed = False

    # ---- обчислення ----
    def compute(self) -> None:
        self._check_open()
        if self._computed:
            raise RuntimeError("compute() may only be called once per handle")
        self._computed = True

        if self._period is None:
            self._cells = self._compute_bounded(self._points)
            self._offsets = np.zeros(self._cells.shape + (3,), dtype=np.int64)
        else:
            self._cells, self._offsets = self._compute_periodic(self._points, self._period)
        self._cells.setflags(write=False)
        self._offsets.setflags(write=False)

    @staticmethod
    def _delaunay(pts: np.ndarray) -> np.ndarray:
        from scipy.spatial import Delaunay, QhullError
        try:
            tri = Delaunay(pts, qhull_options=QHULL_OPTIONS)
        except QhullError as e:
            raise TriangulationError(f"Qhull failed: {e}") from e
        except (ValueError, MemoryError) as e:
            raise TriangulationError(str(e)) from e
        return np.asarray(tri.simplices, dtype=np.int64)

    def _compute_bounded(self, pts: np.ndarray) -> np.ndarray:
        if is_degenerate(pts):
            # копланарні / колінеарні / збіжні — валідний порожній результат
            return np.empty((0, 4), dtype=np.int64)
        return self._delaunay(pts)

    def _compute_periodic(
        self, pts: np.ndarray, period: Tuple[float, float, float]
    ) -> Tuple[np.ndarray, np.ndarray]:
        n = pts.shape[0]
        if n == 0:
            return np.empty((0, 4), dtype=np.int64), np.empty((0, 4, 3), dtype=np.int64)
        per = np.asarray(period, dtype=np.float64)

        # збіжні точки — одна вершина, з індексом першої появи; порядок — як на вході
        uniq, first = np.unique(pts, axis=0, return_index=True)
        order = np.argsort(first, kind="stable")
        first_idx = first[order].astype(np.int64)
        m = first_idx.shape[0]
        if m != n:
            logger.debug(f"Periodic mode: {n - m} coincident points merged.")
        if m < 2:
            # одна точка на торі — лише ґратка її копій, симпліційного розбиття нема
            raise TriangulationError(f"{m} distinct point is too few for a periodic triangulation")

        # одне спільне збурення базових точок: усі 27 копій успадковують його,
        # тож косферичні конфігурації (ґратки) розбиваються однаково в кожній копії
        rng = np.random.default_rng(JITTER_SEED)
        base = uniq[order] + (rng.random((m, 3)) - 0.5) * (JITTER * per)

        shifts = np.asarray(IMAGE_OFFSETS, dtype=np.int64)          # (27,3)
        images = (base[None, :, :] + shifts[:, None, :] * per).reshape(-1, 3)
        simplices = self._delaunay(images)

        orig = simplices % m                     # індекс серед різних точок
        img = simplices // m                     # номер копії (0 — центральна)
        touches_center = np.any(img == 0, axis=1)

        seen: Set[tuple] = set()
        cells: List[Tuple[int, int, int, int]] = []
        offsets: List[np.ndarray] = []
        for s in np.flatnonzero(touches_center):
            idx = orig[s]
            off = shifts[img[s]]                  # (4,3)
            # канонічний вигляд: зсуваємо так, щоб найменша (індекс, зсув) вершина була в (0,0,0)
            pairs = [(int(idx[k]), tuple(int(v) for v in off[k])) for k in range(4)]
            anchor = min(pairs)[1]
            rel = off - np.asarray(anchor, dtype=np.int64)
            key = tuple(sorted((i, tuple(int(v) for v in r)) for i, r in zip(idx.tolist(), rel)))
            if key in seen:
                continue
            seen.add(key)
            cells.append(tuple(int(i) for i in idx))
            offsets.append(rel)

        if not cells:
            raise TriangulationError("periodic triangulation produced no cells")
        local = np.asarray(cells, dtype=np.int64)
        rel_off = np.stack(offsets).astype(np.int64)

        # тетри мають покрити тор рівно один раз; інакше 27 копій замало (дуже мало точок)
        covered = float(np.abs(tet_volumes(base[local] + rel_off * per)).sum())
        expected = float(np.prod(per))
        if not np.isclose(covered, expected, rtol=COVER_RTOL, atol=0.0):
            raise TriangulationError(
                f"periodic cells cover volume {covered:.6g} instead of {expected:.6g}; "
                f"{m} distinct points are too few for the 27-image construction"
            )
        return first_idx[local], rel_off

    # ---- результат ----
    def _check_computed(self) -> None:
        self._check_open()
        if not self._computed or self._cells is None:
            raise RuntimeError("compute() has not completed on this handle")

    def nb_vertices(self) -> int:
        self._check_open()
        return self._nb_vertices

    def nb_cells(self) -> int:
        self._check_computed()
        return int(self._cells.shape[0])

    def cell_vertex(self, cell: int, corner: int) -> int:
        self._check_computed()
        if not 0 <= corner < 4:
            raise IndexError(f"corner {corner} out of range 0..3")
        if not 0 <= cell < self._cells.shape[0]:
            raise IndexError(f"cell {cell} out of range 0..{self._cells.shape[0] - 1}")
        return int(self._cells[cell, corner])

    def cell_offset(self, cell: int, corner: int) -> Tuple[int, int, int]:
        """Ціле зміщення копії вершини (у періодах). Для обмеженого режиму — (0,0,0)."""
        self._check_computed()
        if not 0 <= corner < 4:
            raise IndexError(f"corner {corner} out of range 0..3")
        if not 0 <= cell < self._offsets.shape[0]:
            raise IndexError(f"cell {cell} out of range 0..{self._offsets.shape[0] - 1}")
        ox, oy, oz = (int(v) for v in self._offsets[cell, corner])
        return ox, oy, oz

    def cells(self) -> np.ndarray:
        """(nb_cells, 4) тільки для читання."""
        self._check_computed()
        return self._cells

from __future__ import annotations
from math import floor, isfinite

import numpy as np

from .errors import InvalidInputError

EPS = 1e-10  # обережний епс для перевірок

# ---------- згортання в періодичну область [0,1) ----------
def wrap_unit(x: float) -> float:
    """
    Скалярне згортання x у [0,1): y = x - floor(x), y ≡ x (mod 1).
    Працює для будь-якої величини, не лише «на один період».
    Якщо округлення дало рівно 1.0 (x = -1e-20 тощо), повертаємо 0.0.
    """
    if not isfinite(x):
        raise InvalidInputError(f"cannot wrap non-finite coordinate {x!r}")
    y = x - floor(x)
    return 0.0 if y >= 1.0 else y

def normalize_coords(raw_coords, count: int) -> np.ndarray:
    """
    Нормалізатор точок: перші 3*count значень raw_coords -> новий плаский
    буфер float64 з координатами у [0,1).

    Порядок точок і координат усередині точки зберігається (i -> i),
    на цьому тримається семантика індексів у результаті.
    Вхід не змінюється. count == 0 -> порожній буфер.
    """
    if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
        raise InvalidInputError(f"count must be an integer, got {type(count).__name__}")
    if count < 0:
        raise InvalidInputError(f"count must be >= 0, got {count}")

    flat = np.asarray(raw_coords, dtype=np.float64).reshape(-1)
    need = 3 * int(count)
    if flat.size < need:
        raise InvalidInputError(
            f"expected at least {need} coordinates for {count} points, got {flat.size}"
        )

    out = np.array(flat[:need], dtype=np.float64, copy=True)
    if not np.all(np.isfinite(out)):
        bad = int(np.flatnonzero(~np.isfinite(out))[0])
        raise InvalidInputError(f"coordinate {bad} is not finite: {out[bad]!r}")

    # справжнє модульне згортання, не клампінг
    out -= np.floor(out)
    out[out >= 1.0] = 0.0
    return out

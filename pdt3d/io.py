from __future__ import annotations
from typing import Iterable, Sequence

import numpy as np

from .errors import InvalidInputError


def parse_points_text(text: str) -> np.ndarray:
    """
    Парсить точки з багаторядкового тексту.
    Кожен рядок: x y z або x, y, z. Порожні рядки і '#'-коментарі пропускаються.
    Повертає (N,3) float64.
    """
    points = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.replace(",", " ").split()
        if len(parts) != 3:
            raise InvalidInputError(f"line {lineno}: expected 3 numbers, got {len(parts)}")
        try:
            x, y, z = map(float, parts)
        except ValueError:
            raise InvalidInputError(f"line {lineno}: cannot parse numbers in '{line}'") from None
        points.append((x, y, z))
    return np.asarray(points, dtype=np.float64).reshape(-1, 3)


def read_points(path: str) -> np.ndarray:
    with open(path, "r", encoding="utf-8") as f:
        return parse_points_text(f.read())


def format_cells(cells: Iterable[Sequence[int]]) -> str:
    """Один тетраедр на рядок: 'i j k l'."""
    return "\n".join(" ".join(str(int(v)) for v in cell) for cell in cells)

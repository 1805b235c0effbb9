"""Винятки pdt3d."""


class InvalidInputError(ValueError):
    """Порушено передумови на вході (форма буфера, кількість точок, NaN/inf)."""


class TriangulationError(RuntimeError):
    """Обчислювальна помилка рушія під час compute()."""


class EngineInitError(RuntimeError):
    """Рушій не вдалося ініціалізувати. Фатально для процесу, не для запиту."""

"""
Busy flags per resource category and the shared error slot
"""
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Literal, Optional, get_args

from loguru import logger

LoadingCategory = Literal["nodes", "search", "upload", "records", "skills", "export"]
LOADING_CATEGORIES = get_args(LoadingCategory)


class LoadingTracker:
    """
    Tracks in-flight work per category and the most recent error

    The error slot holds a single message: every failure overwrites it, so
    with concurrent failures the last one to settle is the one shown.
    """

    def __init__(self, on_change: Optional[Callable[[str], None]] = None):
        self._flags: Dict[str, bool] = {category: False for category in LOADING_CATEGORIES}
        self._error: Optional[str] = None
        self._on_change = on_change or (lambda field: None)

    @property
    def flags(self) -> Dict[str, bool]:
        return dict(self._flags)

    @property
    def error(self) -> Optional[str]:
        return self._error

    def is_busy(self, category: str) -> bool:
        return self._flags[self._check(category)]

    @property
    def any_busy(self) -> bool:
        return any(self._flags.values())

    def _check(self, category: str) -> str:
        if category not in self._flags:
            raise ValueError(f"Unknown loading category '{category}'")
        return category

    def set(self, category: str, value: bool) -> None:
        self._flags[self._check(category)] = bool(value)
        self._on_change("loading")

    @contextmanager
    def busy(self, category: str) -> Iterator[None]:
        self.set(category, True)
        try:
            yield
        finally:
            self.set(category, False)

    def set_error(self, message: Optional[str]) -> None:
        if message:
            logger.debug(f"Error slot set: {message}")
        self._error = message
        self._on_change("error")

    def clear_error(self) -> None:
        self.set_error(None)

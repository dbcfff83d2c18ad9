"""Logger interface.

Every component logs through this interface so the concrete backend can be
swapped (structured text, JSON, or a test double).
"""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Abstract logger taking a message plus structured keyword fields."""

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None:
        pass

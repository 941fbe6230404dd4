from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


@dataclass
class ParseOutcome:
    path: Path
    unit: Optional[Any] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.unit is not None


class SourceParser(ABC):
    @abstractmethod
    def can_parse(self, path: Path) -> bool: ...
    @abstractmethod
    def parse_file(self, path: Path) -> ParseOutcome: ...

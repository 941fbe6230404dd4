from __future__ import annotations
from pathlib import Path


class EndpointAgentError(Exception):
    pass


class ProjectPathError(EndpointAgentError):
    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Project path does not exist or is not a directory: {self.path}")

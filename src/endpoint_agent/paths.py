"""경로 결합 / operationId 규칙."""
from __future__ import annotations
import re


def combine_paths(base: str | None, method_path: str | None) -> str:
    """
    ("", "")        -> "/"
    ("/api", "")    -> "/api"
    ("", "/x")      -> "/x"
    ("/api/", "/x") -> "/api/x"
    """
    base = base or ""
    method_path = method_path or ""
    if not base and not method_path:
        return "/"
    if not method_path:
        return base
    if base.endswith("/"):
        base = base[:-1]
    if method_path.startswith("/"):
        method_path = method_path[1:]
    return f"{base}/{method_path}"


def _path_suffix(path: str) -> str:
    s = re.sub(r"[^A-Za-z0-9]", "_", path)
    s = re.sub(r"_+", "_", s)
    return s.strip("_")


def operation_id(class_name: str, method_name: str, path: str | None = None) -> str:
    base = f"{class_name}_{method_name}"
    if not path or path == "/":
        return base
    suffix = _path_suffix(path)
    return f"{base}_{suffix}" if suffix else base


def last_segment(path: str) -> str:
    parts = [p for p in (path or "").split("/") if p]
    return parts[-1] if parts else ""

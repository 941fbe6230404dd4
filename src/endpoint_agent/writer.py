"""ScanResult -> JSON 파일."""
from __future__ import annotations
from pathlib import Path

from endpoint_agent.models import ScanResult


def to_json(result: ScanResult) -> str:
    return result.model_dump_json(indent=2)


def write_scan_result(result: ScanResult, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(to_json(result), encoding="utf-8")
    return out_path


def write_scan_results(results: dict[str, ScanResult], out_dir: Path) -> list[Path]:
    """서비스별 결과를 <out_dir>/<service>.json 으로."""
    return [write_scan_result(r, out_dir / f"{name}.json") for name, r in results.items()]

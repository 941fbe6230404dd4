"""엔드포인트 스캔: 구조 판별 -> 파싱 -> 추출 -> (선택) JSON 출력."""
from __future__ import annotations
from pathlib import Path

from rich.console import Console
from rich.table import Table

from endpoint_agent.config import ScanSettings
from endpoint_agent.models import ScanResult
from endpoint_agent.topology import scan_project, scan_services
from endpoint_agent.writer import write_scan_result, write_scan_results

console = Console()


def print_summary(name: str, result: ScanResult) -> None:
    console.print(
        f"[bold]{name}[/bold]: [green]{len(result.endpoints)}[/green] endpoints, "
        f"{result.files_scanned} files, {result.scan_duration_ms} ms"
    )
    if result.endpoints:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Method")
        table.add_column("Path")
        table.add_column("Handler")
        for ep in result.endpoints:
            table.add_row(ep.http_method, ep.path, f"{ep.controller_class}.{ep.method_name}")
        console.print(table)
    for w in result.warnings:
        console.print(f"[yellow]warning[/yellow] {w}")
    for e in result.errors:
        console.print(f"[red]error[/red] {e}")


def run_scan(
    path: str | Path,
    settings: ScanSettings | None = None,
    out: Path | None = None,
    quiet: bool = False,
) -> dict[str, ScanResult]:
    """
    merged: {루트 이름: 결과} 하나.
    separate: 서비스마다 하나 (마이크로서비스 구조일 때).
    out 이 있으면 merged 는 그 파일로, separate 는 그 디렉터리 아래 <service>.json 으로 쓴다.
    out 이 없고 settings.output_dir 가 있으면 그 디렉터리 아래 <이름>.json 으로 쓴다.
    """
    settings = settings or ScanSettings()
    root = Path(path)
    if not quiet:
        console.print(f"[bold]Project:[/bold] {root}")

    if settings.microservices_output == "separate":
        results = scan_services(root, settings)
    else:
        results = {root.resolve().name: scan_project(root, settings)}

    if not quiet:
        for name, r in results.items():
            print_summary(name, r)

    written: list[Path] = []
    if out is not None and settings.microservices_output != "separate":
        written = [write_scan_result(next(iter(results.values())), out)]
    elif out is not None or settings.output_dir is not None:
        written = write_scan_results(results, out if out is not None else settings.output_dir)
    if not quiet:
        for p in written:
            console.print(f"[bold green]Scan result:[/bold green] {p}")
    return results

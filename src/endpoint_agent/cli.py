"""
엔드포인트 스캔 CLI.
- endpoint-agent scan ./my-project --out out/endpoints.json
- endpoint-agent detect ./my-project
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from endpoint_agent.config import ScanSettings
from endpoint_agent.detector import detect_spring
from endpoint_agent.errors import EndpointAgentError
from endpoint_agent.run import run_scan

console = Console()

app = typer.Typer(
    name="endpoint-agent",
    add_completion=False,
    help="Spring 소스 트리에서 HTTP 엔드포인트를 정적으로 추출",
)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.command("scan")
def scan(
    path: Path = typer.Argument(..., help="프로젝트 루트 경로"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="JSON 출력 경로 (separate 면 디렉터리)"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="파일 스캔 스레드 수"),
    microservices_output: Optional[str] = typer.Option(
        None, "--microservices-output", help="마이크로서비스 결과: merged | separate"
    ),
    include_contracts: bool = typer.Option(False, "--include-contracts", help="인터페이스 자체 엔드포인트도 포함"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="디버그 로그"),
):
    """엔드포인트 스캔."""
    overrides = {}
    if workers is not None:
        overrides["workers"] = workers
    if microservices_output is not None:
        if microservices_output not in ("merged", "separate"):
            console.print(f"[red]Invalid --microservices-output:[/red] {microservices_output}")
            raise typer.Exit(code=2)
        overrides["microservices_output"] = microservices_output
    if include_contracts:
        overrides["include_contract_endpoints"] = True

    settings = ScanSettings(**overrides)
    _setup_logging("DEBUG" if verbose else settings.log_level)

    try:
        run_scan(path, settings, out=out)
    except EndpointAgentError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)


@app.command("detect")
def detect(
    path: Path = typer.Argument(..., help="프로젝트 루트 경로"),
):
    """Spring 프로젝트인지 확인."""
    settings = ScanSettings()
    _setup_logging(settings.log_level)
    if detect_spring(path, settings):
        console.print(f"[bold green]Spring[/bold green] project: {path}")
    else:
        console.print(f"[yellow]No Spring project detected:[/yellow] {path}")
        raise typer.Exit(code=1)

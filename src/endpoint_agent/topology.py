"""
프로젝트 구조 판별 + 스캔 파이프라인.

    single module   : <root>/src/main/java
    multi-module    : 루트가 aggregator(pom packaging / <modules> / settings.gradle include)
    microservices   : 루트에 빌드 파일이 없고, 빌드 파일이 있는 형제 디렉터리가 2개 이상

파일 스캔은 2단계:
    1) 전체 파싱 + ContractIndex(인터페이스 계약, 상수) 구축  -- 끝날 때까지 2단계 시작 안 함
    2) 파일별 엔드포인트 추출
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, TypeVar
import logging
import time

from endpoint_agent.config import ScanSettings
from endpoint_agent.contracts import build_contract_index
from endpoint_agent.errors import ProjectPathError
from endpoint_agent.extractor import EndpointExtractor
from endpoint_agent.models import Endpoint, ScanResult
from endpoint_agent.parsers.base import ParseOutcome
from endpoint_agent.parsers.java_source import JavaSourceParser
from endpoint_agent.scanner import (
    declared_modules,
    descriptor_children,
    find_java_files,
    find_source_roots,
    has_build_descriptor,
    is_aggregator,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Strategy(Enum):
    SINGLE = "single"
    MULTI_MODULE = "multi-module"
    MICROSERVICES = "microservices"


@dataclass
class ProjectLayout:
    root: Path
    strategy: Strategy
    # (이름, 디렉터리). single 이면 비어 있다.
    modules: list[tuple[str, Path]] = field(default_factory=list)


# ---------------------------------------------------------------
# 구조 판별
# ---------------------------------------------------------------

def _collect_modules(directory: Path, settings: ScanSettings, prefix: str, seen: set[Path]) -> list[tuple[str, Path]]:
    names = [m for m in declared_modules(directory) if has_build_descriptor(directory / m, settings)]
    for child in descriptor_children(directory, settings):
        if child.name not in names:
            names.append(child.name)

    out: list[tuple[str, Path]] = []
    for name in names:
        path = (directory / name).resolve()
        if path in seen:
            continue
        seen.add(path)
        label = f"{prefix}{name}"
        out.append((label, directory / name))
        # 중첩 aggregator
        if is_aggregator(directory / name, settings):
            out.extend(_collect_modules(directory / name, settings, f"{label}/", seen))
    return out


def resolve_topology(root: Path, settings: ScanSettings) -> ProjectLayout:
    root = Path(root)
    if is_aggregator(root, settings):
        modules = _collect_modules(root, settings, "", {root.resolve()})
        logger.info("Multi-module project with %d modules", len(modules))
        return ProjectLayout(root, Strategy.MULTI_MODULE, modules)

    if not has_build_descriptor(root, settings):
        services = descriptor_children(root, settings)
        if len(services) >= 2:
            logger.info("Independent microservices: %s", ", ".join(s.name for s in services))
            return ProjectLayout(root, Strategy.MICROSERVICES, [(s.name, s) for s in services])
        if len(services) == 1:
            logger.info("Only one service directory (%s); not treated as microservices", services[0].name)

    return ProjectLayout(root, Strategy.SINGLE)


# ---------------------------------------------------------------
# 파일 스캔
# ---------------------------------------------------------------

def _map(fn: Callable[[T], R], items: Iterable[T], workers: int) -> list[R]:
    """입력 순서대로 결과를 돌려준다."""
    items = list(items)
    if workers <= 1 or len(items) <= 1:
        return [fn(i) for i in items]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fn, items))


def _parse_one(parser: JavaSourceParser, path: Path) -> tuple[ParseOutcome, str | None]:
    try:
        return parser.parse_file(path), None
    except Exception as e:  # javalang 내부 오류도 파일 하나로 한정
        logger.debug("Unexpected parser failure for %s", path, exc_info=True)
        return ParseOutcome(path), f"Error scanning {path}: {type(e).__name__}: {e}"


def _extract_one(extractor: EndpointExtractor, outcome: ParseOutcome) -> tuple[list[Endpoint], str | None]:
    try:
        return extractor.extract(outcome.unit, outcome.path), None
    except Exception as e:
        logger.debug("Extraction failed for %s", outcome.path, exc_info=True)
        return [], f"Error scanning {outcome.path}: {type(e).__name__}: {e}"


def scan_files(project_path: Path, files: list[Path], settings: ScanSettings, result: ScanResult | None = None) -> ScanResult:
    result = result or ScanResult(project_path=str(project_path))
    parser = JavaSourceParser()
    files = [f for f in files if parser.can_parse(f)]

    parsed = _map(lambda p: _parse_one(parser, p), files, settings.workers)
    result.files_scanned += len(files)

    units: list[ParseOutcome] = []
    for outcome, error in parsed:
        if error:
            result.add_error(error)
        elif not outcome.ok:
            msg = f"Failed to parse {outcome.path}: {outcome.error}"
            logger.warning(msg)
            result.add_warning(msg)
        else:
            units.append(outcome)

    # 1단계 종료: 인덱스는 여기서 고정된다
    index = build_contract_index(o.unit for o in units)
    extractor = EndpointExtractor(index, settings)

    for endpoints, error in _map(lambda o: _extract_one(extractor, o), units, settings.workers):
        if error:
            logger.warning(error)
            result.add_error(error)
        result.add_endpoints(endpoints)
    return result


def _scan_dirs(project_path: Path, module_dirs: list[Path], settings: ScanSettings) -> ScanResult:
    started = time.perf_counter()
    result = ScanResult(project_path=str(project_path))

    roots: list[Path] = []
    for d in module_dirs:
        roots.extend(r for r in find_source_roots(d, settings) if r not in roots)
    if not roots:
        logger.info("No source directories under %s", project_path)

    walk_errors: list[str] = []
    files = find_java_files(roots, walk_errors)
    for e in walk_errors:
        result.add_error(e)
    logger.info("Scanning %d Java files under %s", len(files), project_path)
    scan_files(project_path, files, settings, result)

    result.scan_duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info("Found %d endpoints in %s (%d ms)", len(result.endpoints), project_path, result.scan_duration_ms)
    return result


def _check_root(root: Path) -> Path:
    root = Path(root)
    if not root.is_dir():
        raise ProjectPathError(root)
    return root


def scan_services(root: Path, settings: ScanSettings | None = None) -> dict[str, ScanResult]:
    """서비스 이름 -> 결과. 마이크로서비스 구조가 아니면 루트 하나만 담긴다."""
    settings = settings or ScanSettings()
    root = _check_root(root)
    layout = resolve_topology(root, settings)
    if layout.strategy is not Strategy.MICROSERVICES:
        return {root.resolve().name: scan_project(root, settings)}
    return {name: scan_project(path, settings) for name, path in layout.modules}


def scan_project(root: Path, settings: ScanSettings | None = None) -> ScanResult:
    settings = settings or ScanSettings()
    root = _check_root(root)
    layout = resolve_topology(root, settings)

    if layout.strategy is Strategy.SINGLE:
        return _scan_dirs(root, [root], settings)

    if layout.strategy is Strategy.MULTI_MODULE:
        # 루트 자체 소스도 함께, 인덱스는 모듈 전체 공유
        return _scan_dirs(root, [root] + [p for _, p in layout.modules], settings)

    started = time.perf_counter()
    merged = ScanResult(project_path=str(root))
    for name, path in layout.modules:
        merged.merge(scan_project(path, settings), prefix=name)
    merged.scan_duration_ms = int((time.perf_counter() - started) * 1000)
    return merged

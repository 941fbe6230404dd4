"""Spring 프로젝트 여부 판별."""
from __future__ import annotations
from itertools import islice
from pathlib import Path
import logging
import re

from endpoint_agent.config import ScanSettings
from endpoint_agent.scanner import descriptor_children, find_java_files, find_source_roots, has_build_descriptor

logger = logging.getLogger(__name__)

SPRING_DEPENDENCY_RE = re.compile(r"spring-boot-starter|spring-webmvc|spring-webflux")
SPRING_ANNOTATION_RE = re.compile(r"@\s*(RestController|Controller|SpringBootApplication|RequestMapping)\b")
SPRING_CONFIG_RE = re.compile(r"^application(-[\w.-]+)?\.(properties|ya?ml)$")

# 앞쪽 몇 개 파일만 본다
SAMPLE_FILES = 10


def _read(p: Path) -> str:
    return p.read_text(encoding="utf-8", errors="ignore")


def _has_spring_dependency(root: Path, settings: ScanSettings) -> bool:
    for name in settings.build_descriptors:
        f = root / name
        if f.is_file() and SPRING_DEPENDENCY_RE.search(_read(f)):
            logger.info("Detected Spring framework via %s", name)
            return True
    return False


def _has_spring_config(root: Path) -> bool:
    resources = root / "src" / "main" / "resources"
    if not resources.is_dir():
        return False
    for f in resources.rglob("application*"):
        if f.is_file() and SPRING_CONFIG_RE.match(f.name):
            logger.info("Detected Spring framework via %s", f.name)
            return True
    return False


def _has_spring_annotations(root: Path, settings: ScanSettings) -> bool:
    files = find_java_files(find_source_roots(root, settings))
    for f in islice(files, SAMPLE_FILES):
        if SPRING_ANNOTATION_RE.search(_read(f)):
            logger.info("Detected Spring framework via annotations in %s", f.name)
            return True
    return False


def detect_spring(path: Path, settings: ScanSettings | None = None) -> bool:
    settings = settings or ScanSettings()
    root = Path(path)
    if not root.is_dir():
        return False
    if _has_spring_dependency(root, settings) or _has_spring_config(root) or _has_spring_annotations(root, settings):
        return True
    if not has_build_descriptor(root, settings):
        services = descriptor_children(root, settings)
        if len(services) >= 2:
            return any(detect_spring(s, settings) for s in services)
    return False

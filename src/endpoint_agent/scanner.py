"""소스 트리 / 빌드 파일 스캐너."""
from __future__ import annotations
from pathlib import Path
import logging
import os
import re

from endpoint_agent.config import ScanSettings

logger = logging.getLogger(__name__)

GRADLE_SETTINGS = ("settings.gradle", "settings.gradle.kts")

POM_PACKAGING_RE = re.compile(r"<packaging>\s*pom\s*</packaging>")
POM_MODULES_RE = re.compile(r"<modules>")
POM_MODULE_RE = re.compile(r"<module>\s*([^<]+?)\s*</module>")
GRADLE_INCLUDE_RE = re.compile(r"^\s*include\b(.*)$", re.MULTILINE)
QUOTED_RE = re.compile(r"""["']([^"']+)["']""")


def _read(p: Path) -> str:
    return p.read_text(encoding="utf-8", errors="ignore")


def find_source_roots(module_root: Path, settings: ScanSettings) -> list[Path]:
    return [module_root / d for d in settings.source_dirs if (module_root / d).is_dir()]


def find_java_files(roots: list[Path], errors: list[str] | None = None) -> list[Path]:
    """
    .java 파일을 정렬해서 돌려준다.
    읽을 수 없는 디렉터리는 errors 에 경로와 함께 남기고 계속 진행한다.
    """
    found: set[Path] = set()

    def _on_error(e: OSError) -> None:
        msg = f"Cannot read directory {e.filename}: {e.strerror}"
        logger.warning(msg)
        if errors is not None:
            errors.append(msg)

    for root in roots:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in filenames:
                if name.endswith(".java"):
                    found.add(Path(dirpath) / name)
    return sorted(found)


def has_build_descriptor(directory: Path, settings: ScanSettings | None = None) -> bool:
    settings = settings or ScanSettings()
    return any((directory / n).is_file() for n in settings.build_descriptors)


def descriptor_children(directory: Path, settings: ScanSettings) -> list[Path]:
    """바로 아래 하위 디렉터리 중 빌드 파일이 있는 것. 숨김/스킵 목록 제외."""
    try:
        children = sorted(p for p in directory.iterdir() if p.is_dir())
    except OSError as e:
        logger.warning("Cannot list %s: %s", directory, e)
        return []
    return [
        c for c in children
        if not c.name.startswith(".")
        and c.name not in settings.skip_dirs
        and has_build_descriptor(c, settings)
    ]


def _gradle_includes(text: str) -> list[str]:
    out = []
    for m in GRADLE_INCLUDE_RE.finditer(text):
        for name in QUOTED_RE.findall(m.group(1)):
            out.append(name.strip(":").replace(":", "/"))
    return out


def declared_modules(directory: Path) -> list[str]:
    """pom.xml 의 <module> 과 settings.gradle 의 include 를 선언 순서대로."""
    modules: list[str] = []
    pom = directory / "pom.xml"
    if pom.is_file():
        modules.extend(POM_MODULE_RE.findall(_read(pom)))
    for name in GRADLE_SETTINGS:
        f = directory / name
        if f.is_file():
            modules.extend(_gradle_includes(_read(f)))
    return list(dict.fromkeys(modules))


def is_aggregator(directory: Path, settings: ScanSettings) -> bool:
    """
    Maven: <packaging>pom</packaging> 또는 <modules>, 혹은 빈 pom.xml + 빌드 파일 있는 하위 디렉터리.
    Gradle: include 가 있는 settings.gradle(.kts).
    """
    pom = directory / "pom.xml"
    if pom.is_file():
        text = _read(pom)
        if POM_PACKAGING_RE.search(text) or POM_MODULES_RE.search(text):
            return True
        if not text.strip() and descriptor_children(directory, settings):
            return True
    for name in GRADLE_SETTINGS:
        f = directory / name
        if f.is_file() and _gradle_includes(_read(f)):
            return True
    return False

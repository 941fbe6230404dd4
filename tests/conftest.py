import textwrap
from pathlib import Path

import javalang
import pytest

from endpoint_agent.config import ScanSettings
from endpoint_agent.contracts import build_contract_index
from endpoint_agent.extractor import EndpointExtractor
from endpoint_agent.parsers.java_source import JavaSourceParser


def _parse(source: str):
    outcome = JavaSourceParser().parse_text(textwrap.dedent(source), Path("Test.java"))
    assert outcome.ok, outcome.error
    return outcome.unit


def _write_java(module_root: Path, rel: str, source: str) -> Path:
    p = module_root / "src" / "main" / "java" / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(textwrap.dedent(source), encoding="utf-8")
    return p


def _write_file(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


@pytest.fixture
def parse():
    return _parse


@pytest.fixture
def write_java():
    return _write_java


@pytest.fixture
def write_file():
    return _write_file


@pytest.fixture
def extract():
    """소스 여러 개를 한 프로젝트처럼 인덱싱한 뒤 엔드포인트를 뽑는다."""
    def _extract(*sources: str, settings: ScanSettings | None = None):
        units = [_parse(s) for s in sources]
        extractor = EndpointExtractor(build_contract_index(units), settings or ScanSettings())
        endpoints = []
        for u in units:
            endpoints.extend(extractor.extract(u))
        return endpoints
    return _extract


@pytest.fixture
def method_of():
    def _method_of(source: str, name: str):
        unit = _parse(source)
        for _, decl in unit.filter(javalang.tree.MethodDeclaration):
            if decl.name == name:
                return decl
        raise AssertionError(f"method {name} not found")
    return _method_of

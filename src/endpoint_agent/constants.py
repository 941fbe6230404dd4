"""
static final 상수 인덱스.

@RequestHeader(Constants.ACCEPT) 처럼 어노테이션 값이 상수 참조일 때
프로젝트 안의 선언을 찾아 리터럴로 바꾼다. 리터럴 초기값만 다루고
"a" + B, foo() 같은 계산식은 풀지 않는다.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import logging

from endpoint_agent.parsers.java_source import (
    expression_text,
    fields_of,
    is_interface,
    is_literal,
    is_member_reference,
    is_string_literal,
    iter_types,
    package_name,
    strip_quotes,
)

logger = logging.getLogger(__name__)


def _is_constant_field(decl, fld) -> bool:
    if is_interface(decl):
        return True
    mods = getattr(fld, "modifiers", None) or set()
    return "static" in mods and "final" in mods


def literal_value(node) -> Optional[str]:
    if not is_literal(node):
        return None
    if is_string_literal(node):
        return strip_quotes(node.value)
    return expression_text(node)


@dataclass(frozen=True)
class ConstantIndex:
    # "Constants.ACCEPT", "Outer.Inner.X", "com.acme.Constants.ACCEPT" -> "Accept"
    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.values)

    def lookup(self, reference: str) -> Optional[str]:
        return self.values.get(reference)

    def resolve(self, node, owner: str | None = None) -> Optional[str]:
        """
        어노테이션 속성 값 -> 문자열.
        - 없음          -> None
        - 리터럴        -> 따옴표 제거
        - 상수 참조     -> 인덱스에 있으면 값, 없으면 원문 그대로
        owner 는 한정자 없는 참조(ACCEPT)를 같은 클래스 안에서 찾을 때 쓴다.
        """
        if node is None:
            return None
        lit = literal_value(node)
        if lit is not None:
            return lit
        text = expression_text(node)
        if is_member_reference(node):
            found = self.lookup(text)
            if found is None and not node.qualifier and owner:
                found = self.lookup(f"{owner}.{node.member}")
            if found is not None:
                return found
            logger.debug("Unresolved constant reference: %s", text)
        return text


def build_constant_index(units: Iterable) -> ConstantIndex:
    values: dict[str, str] = {}

    def _put(key: str, value: str) -> None:
        if key in values and values[key] != value:
            logger.debug("Duplicate constant %s, keeping first value", key)
            return
        values.setdefault(key, value)

    for unit in units:
        pkg = package_name(unit)
        for qname, decl in iter_types(unit):
            for fld in fields_of(decl):
                if not _is_constant_field(decl, fld):
                    continue
                for var in getattr(fld, "declarators", None) or []:
                    value = literal_value(getattr(var, "initializer", None))
                    if value is None:
                        continue
                    _put(f"{decl.name}.{var.name}", value)
                    if qname != decl.name:
                        _put(f"{qname}.{var.name}", value)
                    if pkg:
                        _put(f"{pkg}.{qname}.{var.name}", value)

    return ConstantIndex(values=MappingProxyType(values))

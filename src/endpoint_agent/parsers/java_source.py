from __future__ import annotations
from pathlib import Path
from typing import Iterator, Optional
import logging
import re

import javalang
from javalang.parser import JavaSyntaxError
from javalang.tokenizer import LexerError

from endpoint_agent.parsers.base import ParseOutcome, SourceParser

logger = logging.getLogger(__name__)


class JavaSourceParser(SourceParser):
    """javalang 으로 .java 파일 하나를 파싱한다. 실패는 예외 대신 ParseOutcome.error 로 돌려준다."""

    def can_parse(self, path: Path) -> bool:
        return path.suffix.lower() == ".java"

    def parse_file(self, path: Path) -> ParseOutcome:
        try:
            text = path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            return ParseOutcome(path, error=f"cannot read file: {e}")
        return self.parse_text(text, path)

    def parse_text(self, text: str, path: Path) -> ParseOutcome:
        try:
            unit = javalang.parse.parse(text)
        except JavaSyntaxError as e:
            where = getattr(getattr(e, "at", None), "position", None)
            reason = e.description or "syntax error"
            if where:
                reason = f"{reason} at line {where[0]}"
            logger.debug("Failed to parse %s: %s", path, reason)
            return ParseOutcome(path, error=reason)
        except LexerError as e:
            logger.debug("Failed to tokenize %s: %s", path, e)
            return ParseOutcome(path, error=f"lexer error: {e}")
        return ParseOutcome(path, unit=unit)


# ---------------------------------------------------------------
# 트리 탐색 헬퍼
# ---------------------------------------------------------------

def package_name(unit) -> str:
    pkg = getattr(unit, "package", None)
    return pkg.name if pkg is not None else ""


def _members(decl) -> list:
    body = getattr(decl, "body", None) or []
    # enum 은 EnumBody(constants, declarations)
    if not isinstance(body, list):
        body = getattr(body, "declarations", None) or []
    return body


def iter_types(unit) -> Iterator[tuple[str, object]]:
    """
    (Outer.Inner 형태 이름, TypeDeclaration) 을 소스 순서대로 돌려준다.
    중첩 타입 포함, 패키지는 붙이지 않는다.
    """
    def _walk(decl, prefix: str):
        name = f"{prefix}.{decl.name}" if prefix else decl.name
        yield name, decl
        for m in _members(decl):
            if isinstance(m, javalang.tree.TypeDeclaration):
                yield from _walk(m, name)

    for t in getattr(unit, "types", None) or []:
        yield from _walk(t, "")


def is_interface(decl) -> bool:
    return isinstance(decl, javalang.tree.InterfaceDeclaration)


def methods_of(decl) -> list:
    return [m for m in _members(decl) if isinstance(m, javalang.tree.MethodDeclaration)]


def fields_of(decl) -> list:
    return [m for m in _members(decl) if isinstance(m, javalang.tree.FieldDeclaration)]


def implemented_names(decl) -> list[str]:
    """implements 절의 이름들 (com.x.FooApi 면 'com.x.FooApi' 그대로)."""
    names = []
    for t in getattr(decl, "implements", None) or []:
        names.append(type_text(t, with_arguments=False))
    return names


# ---------------------------------------------------------------
# 타입 텍스트
# ---------------------------------------------------------------

def _type_argument_text(arg) -> str:
    inner = getattr(arg, "type", None)
    pattern = getattr(arg, "pattern_type", None)
    if inner is None:
        return "?"
    text = type_text(inner)
    if pattern in ("extends", "super"):
        return f"? {pattern} {text}"
    return text


def type_text(t, with_arguments: bool = True) -> str:
    """소스에 적힌 모양 그대로: List<Foo>, MultipartFile[], org.x.Foo"""
    if t is None:
        return "void"
    parts = []
    node = t
    while node is not None:
        s = node.name
        args = getattr(node, "arguments", None)
        if with_arguments and args:
            s += "<" + ", ".join(_type_argument_text(a) for a in args) + ">"
        parts.append(s)
        node = getattr(node, "sub_type", None)
    dims = getattr(t, "dimensions", None) or []
    return ".".join(parts) + "[]" * len(dims)


def simple_name(t) -> str:
    """org.x.Foo<Bar>[] -> Foo"""
    node = t
    while getattr(node, "sub_type", None) is not None:
        node = node.sub_type
    return getattr(node, "name", "") or ""


def type_arguments(t) -> list:
    """가장 안쪽 이름에 붙은 타입 인자 목록. 와일드카드(?)는 None 으로 들어간다."""
    node = t
    while getattr(node, "sub_type", None) is not None:
        node = node.sub_type
    return [getattr(a, "type", None) for a in (getattr(node, "arguments", None) or [])]


def is_array(t) -> bool:
    return bool(getattr(t, "dimensions", None))


def parameter_type_text(param) -> str:
    text = type_text(param.type)
    return text + "..." if getattr(param, "varargs", False) else text


# ---------------------------------------------------------------
# 표현식 / 어노테이션 값
# ---------------------------------------------------------------

def expression_text(node) -> str:
    if node is None:
        return ""
    if isinstance(node, javalang.tree.Literal):
        prefix = "".join(node.prefix_operators or [])
        return f"{prefix}{node.value}"
    if isinstance(node, javalang.tree.MemberReference):
        return f"{node.qualifier}.{node.member}" if node.qualifier else node.member
    if isinstance(node, javalang.tree.ElementArrayValue):
        return "{" + ", ".join(expression_text(v) for v in node.values or []) + "}"
    if isinstance(node, javalang.tree.ArrayInitializer):
        return "{" + ", ".join(expression_text(v) for v in node.initializers or []) + "}"
    if isinstance(node, javalang.tree.BinaryOperation):
        return f"{expression_text(node.operandl)} {node.operator} {expression_text(node.operandr)}"
    if isinstance(node, javalang.tree.MethodInvocation):
        target = f"{node.qualifier}.{node.member}" if node.qualifier else node.member
        args = ", ".join(expression_text(a) for a in node.arguments or [])
        return f"{target}({args})"
    if isinstance(node, javalang.tree.Annotation):
        return f"@{node.name}"
    if isinstance(node, javalang.tree.ClassReference):
        return f"{type_text(node.type)}.class"
    return str(getattr(node, "value", None) or getattr(node, "member", None) or type(node).__name__)


def strip_quotes(text: str) -> str:
    return re.sub(r"^'|'$", "", re.sub(r'^"|"$', "", text))


def is_string_literal(node) -> bool:
    return isinstance(node, javalang.tree.Literal) and str(node.value).startswith(('"', "'"))


def is_member_reference(node) -> bool:
    return isinstance(node, javalang.tree.MemberReference)


def is_literal(node) -> bool:
    return isinstance(node, javalang.tree.Literal)


def element_values(node) -> list:
    """배열 값이면 펼치고, 단일 값이면 [node]."""
    if node is None:
        return []
    if isinstance(node, javalang.tree.ElementArrayValue):
        return list(node.values or [])
    if isinstance(node, javalang.tree.ArrayInitializer):
        return list(node.initializers or [])
    return [node]


def annotation_attr(annotation, *names: str):
    """
    @X("a") 는 value 로 취급한다.
    속성이 없으면 None (빈 문자열과 구분).
    """
    element = getattr(annotation, "element", None)
    if element is None:
        return None
    if isinstance(element, list):
        for pair in element:
            if getattr(pair, "name", None) in names:
                return pair.value
        return None
    return element if "value" in names else None


def first_doc_line(doc: Optional[str]) -> Optional[str]:
    if not doc:
        return None
    body = re.sub(r"^\s*/\*+", "", doc)
    body = re.sub(r"\*+/\s*$", "", body)
    for line in body.splitlines():
        line = line.strip().lstrip("*").strip()
        if not line:
            continue
        if line.startswith("@"):
            break
        return line
    return None

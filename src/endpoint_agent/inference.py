"""
메서드 이름 기반 추론.

구현한 인터페이스 소스가 프로젝트에 없을 때(@Override 메서드만 남은 경우)
이름과 파라미터만으로 HTTP 메서드와 경로를 추측한다.

    listOwners()                          GET  /owners
    getOwner(Integer ownerId)             GET  /owners/{ownerId}
    addPetToOwner(Integer ownerId, Pet p) POST /owners/{ownerId}/pets

애매하면 가장 단순한 추측으로 떨어지고 예외는 내지 않는다.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import re

from endpoint_agent.annotations import AnnotationKind, find_annotation, has_annotation
from endpoint_agent.constants import ConstantIndex
from endpoint_agent.paths import combine_paths, last_segment
from endpoint_agent.parsers.java_source import annotation_attr, is_array, simple_name

# 우선순위 순서
VERB_PREFIXES = (
    ("list", "GET"), ("get", "GET"), ("find", "GET"), ("retrieve", "GET"), ("search", "GET"),
    ("add", "POST"), ("create", "POST"), ("save", "POST"), ("post", "POST"), ("register", "POST"),
    ("update", "PUT"), ("modify", "PUT"), ("put", "PUT"), ("replace", "PUT"),
    ("delete", "DELETE"), ("remove", "DELETE"),
    ("patch", "PATCH"),
)

ID_TYPES = {"int", "Integer", "long", "Long", "short", "Short", "BigInteger", "UUID"}

# XToY 면 Y 가 부모
REVERSING_CONNECTORS = {"To", "For", "Of", "In", "On", "From"}
DROPPED_WORDS = {"With", "And", "All"}
CRITERIA_MARKER = "By"

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


@dataclass
class _Entity:
    word: str
    ident: Optional[str] = None

    @property
    def key(self) -> str:
        return singular(self.word).lower()

    @property
    def segment(self) -> str:
        return kebab(plural(self.word))


@dataclass
class InferredMapping:
    http_method: str
    path: str
    path_variables: list[str] = field(default_factory=list)


def split_words(name: str) -> list[str]:
    return _WORD_RE.findall(name)


def infer_verb(method_name: str) -> tuple[str, str]:
    """(verb, 접두어를 뗀 나머지). getter 처럼 단어 경계가 아니면 접두어로 보지 않는다."""
    for prefix, verb in VERB_PREFIXES:
        if not method_name.startswith(prefix):
            continue
        rest = method_name[len(prefix):]
        if not rest or not rest[0].islower():
            return verb, rest
    return "GET", ""


def singular(word: str) -> str:
    lower = word.lower()
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if re.search(r"(s|x|z|ch|sh)es$", lower):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def plural(word: str) -> str:
    if singular(word) != word:
        return word
    lower = word.lower()
    if re.search(r"[^aeiou]y$", lower):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return word + "es"
    return word + "s"


def kebab(word: str) -> str:
    return "-".join(w.lower() for w in split_words(word)) or word.lower()


def entity_words(rest: str) -> list[str]:
    """
    접두어 뒤 이름에서 엔티티 단어만 뽑아 부모 -> 자식 순서로 돌려준다.
    PetToOwner -> [Owner, Pet], OwnersByLastName -> [Owners]
    """
    words = split_words(rest)
    if CRITERIA_MARKER in words:
        words = words[:words.index(CRITERIA_MARKER)]

    groups: list[list[str]] = [[]]
    for w in words:
        if w in REVERSING_CONNECTORS:
            groups.append([])
        elif w not in DROPPED_WORDS and not w.isdigit():
            groups[-1].append(w)
    ordered: list[str] = []
    for g in reversed(groups):
        ordered.extend(g)
    return ordered


def _id_stem(name: str) -> Optional[str]:
    """ownerId -> owner. uuid, pid 처럼 camelCase Id 접미어가 아니면 None."""
    if len(name) > 2 and name.endswith("Id") and name[-3].islower():
        return name[:-2]
    return None


def _merge_compound(entities: list[_Entity], stem: str) -> Optional[_Entity]:
    """orderItemId 처럼 이어진 단어 두 개 이상을 가리키면 하나로 합친다."""
    for i in range(len(entities)):
        joined = ""
        for j in range(i, len(entities)):
            if entities[j].ident is not None:
                break
            joined += singular(entities[j].word) if j == i else entities[j].word
            candidate = singular(joined).lower()
            if j > i and candidate == stem:
                words = "".join(e.word for e in entities[i:j + 1])
                merged = _Entity(words)
                entities[i:j + 1] = [merged]
                return merged
    return None


def _identifier_params(method, constants: ConstantIndex, owner: str | None) -> list[tuple[str, str, bool]]:
    """(경로 변수 이름, 선언 이름, 어노테이션 없음) 목록. 선언 순서."""
    out = []
    for param in getattr(method, "parameters", None) or []:
        if is_array(param.type) or simple_name(param.type) not in ID_TYPES:
            continue
        if has_annotation(param.annotations, {
            AnnotationKind.REQUEST_PARAM, AnnotationKind.REQUEST_HEADER, AnnotationKind.REQUEST_BODY,
        }):
            continue
        marker = find_annotation(param.annotations, AnnotationKind.PATH_VARIABLE)
        if marker is not None:
            name = constants.resolve(annotation_attr(marker, "value", "name"), owner) or param.name
            out.append((name, param.name, False))
        else:
            out.append((param.name, param.name, True))
    return out


def infer_mapping(
    method,
    base_path: str = "",
    constants: ConstantIndex | None = None,
    owner: str | None = None,
) -> InferredMapping:
    constants = constants or ConstantIndex()
    verb, rest = infer_verb(method.name)
    entities = [_Entity(w) for w in entity_words(rest)]
    idents = _identifier_params(method, constants, owner)

    leftovers: list[str] = []
    parents = 0
    for name, _, _ in idents:
        stem = _id_stem(name)
        key = stem.lower() if stem else None
        target = None
        if stem:
            target = next((e for e in entities if e.key == key and e.ident is None), None)
            if target is None:
                target = _merge_compound(entities, key)
            if target is None and not any(e.key == key for e in entities):
                target = _Entity(stem[0].upper() + stem[1:])
                entities.insert(parents, target)
                parents += 1
        if target is not None:
            target.ident = name
        else:
            leftovers.append(name)

    for e in entities:
        if not leftovers:
            break
        if e.ident is None:
            e.ident = leftovers.pop(0)

    segments: list[str] = []
    for i, e in enumerate(entities):
        if not (i == 0 and last_segment(base_path).lower() == e.segment):
            segments.append(e.segment)
        if e.ident:
            segments.append("{" + e.ident + "}")
    segments.extend("{" + name + "}" for name in leftovers)

    path = combine_paths(base_path, "/".join(segments)) if segments else (base_path or "/")
    used = {e.ident for e in entities if e.ident} | set(leftovers)
    implicit = [decl for name, decl, bare in idents if bare and name in used]
    return InferredMapping(http_method=verb, path=path, path_variables=implicit)

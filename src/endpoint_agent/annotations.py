"""Spring 어노테이션 식별 테이블. 새 마커는 여기 한 곳에만 추가한다."""
from __future__ import annotations
from enum import Enum
from typing import Iterable, Optional

from endpoint_agent.models import ParameterLocation


class AnnotationKind(Enum):
    REST_CONTROLLER = "RestController"
    CONTROLLER = "Controller"
    REQUEST_MAPPING = "RequestMapping"
    GET_MAPPING = "GetMapping"
    POST_MAPPING = "PostMapping"
    PUT_MAPPING = "PutMapping"
    DELETE_MAPPING = "DeleteMapping"
    PATCH_MAPPING = "PatchMapping"
    PATH_VARIABLE = "PathVariable"
    REQUEST_PARAM = "RequestParam"
    REQUEST_HEADER = "RequestHeader"
    REQUEST_BODY = "RequestBody"
    DEPRECATED = "Deprecated"
    OVERRIDE = "Override"


_BY_NAME = {k.value: k for k in AnnotationKind}

CONTROLLER_MARKERS = {AnnotationKind.REST_CONTROLLER, AnnotationKind.CONTROLLER}

VERB_MAPPINGS = {
    AnnotationKind.GET_MAPPING: "GET",
    AnnotationKind.POST_MAPPING: "POST",
    AnnotationKind.PUT_MAPPING: "PUT",
    AnnotationKind.DELETE_MAPPING: "DELETE",
    AnnotationKind.PATCH_MAPPING: "PATCH",
}

MAPPING_ANNOTATIONS = set(VERB_MAPPINGS) | {AnnotationKind.REQUEST_MAPPING}

PARAMETER_LOCATIONS = {
    AnnotationKind.PATH_VARIABLE: ParameterLocation.PATH,
    AnnotationKind.REQUEST_PARAM: ParameterLocation.QUERY,
    AnnotationKind.REQUEST_HEADER: ParameterLocation.HEADER,
}

# RequestMethod.X 텍스트에서 찾는 순서
HTTP_VERBS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def kind_of(annotation) -> Optional[AnnotationKind]:
    """@org.springframework...GetMapping 처럼 FQN 이어도 마지막 이름으로 판별."""
    name = getattr(annotation, "name", None) or ""
    return _BY_NAME.get(name.rsplit(".", 1)[-1])


def find_annotation(annotations: Iterable, kinds) -> Optional[object]:
    if isinstance(kinds, AnnotationKind):
        kinds = {kinds}
    for a in annotations or []:
        if kind_of(a) in kinds:
            return a
    return None


def has_annotation(annotations: Iterable, kinds) -> bool:
    return find_annotation(annotations, kinds) is not None

"""
파라미터 분류 / 요청 바디 선택 / 응답 추론.

파라미터 하나는 정확히 하나의 결과로 분류된다:
path, query, header, formData 파라미터 / 바디 후보 / 제외.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional

from endpoint_agent.annotations import AnnotationKind, PARAMETER_LOCATIONS, find_annotation
from endpoint_agent.constants import ConstantIndex
from endpoint_agent.models import MediaType, Parameter, ParameterLocation, RequestBody, Response
from endpoint_agent.parsers.java_source import (
    annotation_attr,
    expression_text,
    is_array,
    parameter_type_text,
    simple_name,
    type_arguments,
    type_text,
)

JSON = "application/json"

SCALAR_TYPES = {
    "String",
    "int", "Integer",
    "long", "Long",
    "boolean", "Boolean",
    "double", "Double",
    "float", "Float",
    "short", "Short",
    "byte", "Byte",
    "char", "Character",
}

UPLOAD_CARRIERS = {"MultipartFile", "Part", "FilePart"}
UPLOAD_COLLECTIONS = {"List", "Collection", "Set"}

# 프레임워크가 주입하는 타입. 바디로 고르지 않는다.
CONTEXT_TYPES = {
    "Principal", "Authentication",
    "HttpServletRequest", "HttpServletResponse", "HttpSession",
    "ServletRequest", "ServletResponse",
    "WebRequest", "NativeWebRequest",
    "Locale", "TimeZone", "ZoneId",
    "Model", "ModelMap", "RedirectAttributes", "BindingResult", "Errors", "SessionStatus",
    "UriComponentsBuilder", "HttpEntity", "HttpHeaders",
    "InputStream", "OutputStream", "Reader", "Writer",
    "Pageable", "Sort",
} | UPLOAD_CARRIERS

RESPONSE_WRAPPERS = {
    "ResponseEntity", "Optional", "Mono", "CompletableFuture",
    "Callable", "DeferredResult", "HttpEntity",
}

_MARKERS = (
    AnnotationKind.PATH_VARIABLE,
    AnnotationKind.REQUEST_PARAM,
    AnnotationKind.REQUEST_HEADER,
    AnnotationKind.REQUEST_BODY,
)


@dataclass
class ClassifiedParameters:
    parameters: list[Parameter] = field(default_factory=list)
    body: Optional[RequestBody] = None

    @property
    def consumes(self) -> list[str]:
        return [JSON] if self.body is not None else []


def is_upload_carrier(t) -> bool:
    name = simple_name(t)
    if name in UPLOAD_CARRIERS:
        return True
    if name in UPLOAD_COLLECTIONS:
        args = type_arguments(t)
        return len(args) == 1 and args[0] is not None and simple_name(args[0]) in UPLOAD_CARRIERS
    return False


def is_scalar(param) -> bool:
    if is_array(param.type) or getattr(param, "varargs", False):
        return False
    return simple_name(param.type) in SCALAR_TYPES


def is_context_type(t) -> bool:
    return simple_name(t) in CONTEXT_TYPES


def parameter_name(marker, param, constants: ConstantIndex, owner: str | None = None) -> str:
    override = constants.resolve(annotation_attr(marker, "value", "name"), owner)
    return override or param.name


def is_required(marker) -> bool:
    value = annotation_attr(marker, "required")
    if value is None:
        return True
    return expression_text(value).strip() != "false"


def _marker(param):
    """여러 개가 붙어 있으면 path > query > header > body 순."""
    for kind in _MARKERS:
        ann = find_annotation(param.annotations, kind)
        if ann is not None:
            return kind, ann
    return None, None


def _json_body(param) -> RequestBody:
    return RequestBody(
        required=True,
        content={JSON: MediaType(schema_name=parameter_type_text(param))},
    )


def classify_parameters(
    method,
    constants: ConstantIndex,
    path_variables: Iterable[str] = (),
    owner: str | None = None,
) -> ClassifiedParameters:
    """
    path_variables: 어노테이션 없이 경로 변수로 쓰인 파라미터 이름 (이름 추론 결과).
    """
    implicit_path = set(path_variables)
    out = ClassifiedParameters()
    explicit_body = None
    candidates = []

    for param in getattr(method, "parameters", None) or []:
        kind, marker = _marker(param)

        if kind is AnnotationKind.REQUEST_BODY:
            if explicit_body is None:
                explicit_body = param
            continue

        if kind is not None:
            location = PARAMETER_LOCATIONS[kind]
            required = True if kind is AnnotationKind.PATH_VARIABLE else is_required(marker)
            if kind is AnnotationKind.REQUEST_PARAM and is_upload_carrier(param.type):
                location = ParameterLocation.FORM_DATA
            out.parameters.append(Parameter(
                name=parameter_name(marker, param, constants, owner),
                location=location,
                required=required,
                type=parameter_type_text(param),
            ))
            continue

        if param.name in implicit_path:
            out.parameters.append(Parameter(
                name=param.name,
                location=ParameterLocation.PATH,
                required=True,
                type=parameter_type_text(param),
            ))
        elif is_scalar(param):
            out.parameters.append(Parameter(
                name=param.name,
                location=ParameterLocation.QUERY,
                required=False,
                type=parameter_type_text(param),
            ))
        else:
            candidates.append(param)

    if explicit_body is not None:
        out.body = _json_body(explicit_body)
    else:
        for param in candidates:
            if is_context_type(param.type) or is_upload_carrier(param.type):
                continue
            out.body = _json_body(param)
            break
    return out


def infer_response(return_type) -> Response:
    """200 응답 하나. void 면 content 없음, 래퍼 타입은 한 겹 벗긴다."""
    if return_type is None:
        return Response()
    if simple_name(return_type) in RESPONSE_WRAPPERS and not is_array(return_type):
        args = type_arguments(return_type)
        if len(args) == 1 and args[0] is not None:
            schema = type_text(args[0])
        else:
            schema = "Object"
    else:
        schema = type_text(return_type)
    return Response(content={JSON: MediaType(schema_name=schema)})

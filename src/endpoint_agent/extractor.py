"""
컨트롤러 / 엔드포인트 탐지.

컴파일 단위 하나에서 Endpoint 목록을 만든다.
1) 컨트롤러 메서드에 직접 붙은 매핑
2) 구현한 인터페이스(계약)에 선언된 매핑
3) 인터페이스 소스가 없으면 @Override 메서드를 이름으로 추론
"""
from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging

from endpoint_agent.annotations import (
    CONTROLLER_MARKERS,
    HTTP_VERBS,
    MAPPING_ANNOTATIONS,
    VERB_MAPPINGS,
    AnnotationKind,
    find_annotation,
    has_annotation,
    kind_of,
)
from endpoint_agent.classifier import classify_parameters, infer_response, JSON
from endpoint_agent.config import ScanSettings
from endpoint_agent.constants import ConstantIndex
from endpoint_agent.contracts import (
    ContractIndex,
    ContractKind,
    InterfaceContract,
    class_base_path,
    classify_controller,
    has_mapped_methods,
)
from endpoint_agent.inference import infer_mapping
from endpoint_agent.models import Endpoint
from endpoint_agent.parsers.java_source import (
    annotation_attr,
    element_values,
    expression_text,
    first_doc_line,
    is_interface,
    iter_types,
    methods_of,
)
from endpoint_agent.paths import combine_paths, operation_id

logger = logging.getLogger(__name__)


def is_controller(decl) -> bool:
    return not is_interface(decl) and has_annotation(getattr(decl, "annotations", None), CONTROLLER_MARKERS)


def mapping_verb(annotation) -> str:
    kind = kind_of(annotation)
    if kind in VERB_MAPPINGS:
        return VERB_MAPPINGS[kind]
    text = expression_text(annotation_attr(annotation, "method"))
    for verb in HTTP_VERBS:
        if verb in text:
            return verb
    return "GET"


def mapping_paths(annotation, constants: ConstantIndex, owner: str | None = None) -> list[str]:
    """선언 순서의 경로 목록. 경로가 없으면 [""]."""
    values = element_values(annotation_attr(annotation, "value", "path"))
    paths = [constants.resolve(v, owner) or "" for v in values]
    return paths or [""]


def _declared_media_types(annotation, attr: str, constants: ConstantIndex, owner: str | None) -> list[str]:
    values = element_values(annotation_attr(annotation, attr))
    return [v for v in (constants.resolve(n, owner) for n in values) if v]


class EndpointExtractor:
    """ContractIndex(1차 패스 결과)는 읽기만 한다."""

    def __init__(self, index: ContractIndex, settings: ScanSettings | None = None):
        self.index = index
        self.settings = settings or ScanSettings()

    @property
    def constants(self) -> ConstantIndex:
        return self.index.constants

    def extract(self, unit, path: Path | None = None) -> list[Endpoint]:
        endpoints: list[Endpoint] = []
        types = list(iter_types(unit))
        local_interfaces = {decl.name: decl for _, decl in types if is_interface(decl)}

        for _, decl in types:
            if is_interface(decl):
                if self.settings.include_contract_endpoints and has_mapped_methods(decl):
                    endpoints.extend(self.extract_contract(decl))
                continue
            if not is_controller(decl):
                continue
            found = self.extract_controller(decl, local_interfaces)
            logger.debug("%s: %d endpoints in %s", path or "<unit>", len(found), decl.name)
            endpoints.extend(found)
        return endpoints

    def extract_contract(self, decl) -> list[Endpoint]:
        """인터페이스 자체의 매핑을 인터페이스 이름으로 내보낸다."""
        base = class_base_path(decl, self.constants, decl.name)
        out: list[Endpoint] = []
        for m in methods_of(decl):
            out.extend(self._mapped(decl.name, base, m))
        return out

    def extract_controller(self, decl, local_interfaces: dict | None = None) -> list[Endpoint]:
        base = class_base_path(decl, self.constants, decl.name)
        out: list[Endpoint] = []

        for m in methods_of(decl):
            out.extend(self._mapped(decl.name, base, m))

        inferred = False
        for c in classify_controller(decl, self.index, local_interfaces):
            logger.debug("%s implements %s: %s", decl.name, c.interface_name or "-", c.kind.value)
            if c.kind is ContractKind.INTERFACE_WITH_ANNOTATIONS:
                out.extend(self._from_contract(decl, base, c.contract))
            elif c.kind is ContractKind.INTERFACE_WITHOUT_SOURCE and not inferred:
                out.extend(self._inferred(decl, base))
                inferred = True
        return out

    # -----------------------------------------------------------

    def _mapped(self, class_name: str, base: str, method, source=None, owner: str | None = None) -> list[Endpoint]:
        """
        method 에 붙은 매핑 어노테이션으로 엔드포인트를 만든다.
        source 가 있으면 javadoc/@Deprecated 는 source(구현 메서드)도 함께 본다.
        owner 는 한정자 없는 상수를 찾을 클래스. 기본은 class_name.
        """
        owner = owner or class_name
        ann = find_annotation(method.annotations, MAPPING_ANNOTATIONS)
        if ann is None:
            return []
        verb = mapping_verb(ann)
        consumes = _declared_media_types(ann, "consumes", self.constants, owner)
        produces = _declared_media_types(ann, "produces", self.constants, owner)
        return [
            self._build(
                class_name, method, verb, combine_paths(base, p),
                extra_consumes=consumes, extra_produces=produces, source=source, owner=owner,
            )
            for p in mapping_paths(ann, self.constants, owner)
        ]

    def _from_contract(self, decl, base: str, contract: InterfaceContract) -> list[Endpoint]:
        impls = {}
        for m in methods_of(decl):
            impls.setdefault((m.name, len(m.parameters or [])), m)

        base_used = base or contract.base_path
        out: list[Endpoint] = []
        for im in methods_of(contract.declaration):
            impl = impls.get((im.name, len(im.parameters or [])))
            if impl is None:
                continue
            out.extend(self._mapped(decl.name, base_used, im, source=impl, owner=contract.name))
        return out

    def _inferred(self, decl, base: str) -> list[Endpoint]:
        out: list[Endpoint] = []
        for m in methods_of(decl):
            if not has_annotation(m.annotations, AnnotationKind.OVERRIDE):
                continue
            # 매핑이 붙은 @Override 는 _mapped 에서 이미 나왔다
            if has_annotation(m.annotations, MAPPING_ANNOTATIONS):
                continue
            guess = infer_mapping(m, base, self.constants, decl.name)
            logger.debug("Inferred %s %s for %s.%s", guess.http_method, guess.path, decl.name, m.name)
            out.append(self._build(
                decl.name, m, guess.http_method, guess.path, path_variables=guess.path_variables,
            ))
        return out

    def _build(
        self,
        class_name: str,
        method,
        verb: str,
        path: str,
        path_variables: list[str] | None = None,
        extra_consumes: list[str] | None = None,
        extra_produces: list[str] | None = None,
        source=None,
        owner: str | None = None,
    ) -> Endpoint:
        params = classify_parameters(method, self.constants, path_variables or (), owner or class_name)
        response = infer_response(method.return_type)

        consumes = params.consumes + list(extra_consumes or [])
        produces = ([JSON] if response.content else []) + list(extra_produces or [])

        description: Optional[str] = first_doc_line(getattr(method, "documentation", None))
        deprecated = has_annotation(method.annotations, AnnotationKind.DEPRECATED)
        if source is not None:
            description = description or first_doc_line(getattr(source, "documentation", None))
            deprecated = deprecated or has_annotation(source.annotations, AnnotationKind.DEPRECATED)

        return Endpoint(
            http_method=verb,
            path=path,
            operation_id=operation_id(class_name, method.name, path),
            description=description,
            parameters=params.parameters,
            responses={"200": response},
            request_body=params.body,
            controller_class=class_name,
            method_name=method.name,
            consumes=consumes,
            produces=produces,
            deprecated=deprecated,
        )

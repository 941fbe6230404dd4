"""
인터페이스 계약 인덱스 (1차 패스).

매핑 어노테이션이 달린 메서드를 가진 인터페이스(예: OpenAPI generator 가 만든 XxxApi)를
이름으로 모아 둔다. 2차 패스(컨트롤러 분류)는 이 인덱스가 다 만들어진 뒤에만 시작한다.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import logging

from endpoint_agent.annotations import MAPPING_ANNOTATIONS, AnnotationKind, find_annotation, has_annotation
from endpoint_agent.constants import ConstantIndex, build_constant_index
from endpoint_agent.parsers.java_source import (
    annotation_attr,
    element_values,
    implemented_names,
    is_interface,
    iter_types,
    methods_of,
    package_name,
)

logger = logging.getLogger(__name__)


class ContractKind(Enum):
    NO_INTERFACE = "no_interface"
    INTERFACE_WITH_ANNOTATIONS = "interface_with_annotations"
    INTERFACE_WITHOUT_SOURCE = "interface_without_source"


@dataclass(frozen=True)
class InterfaceContract:
    name: str
    qualified_name: str
    declaration: object
    base_path: str = ""


@dataclass(frozen=True)
class ContractIndex:
    interfaces: Mapping[str, InterfaceContract] = field(default_factory=lambda: MappingProxyType({}))
    # 소스는 있지만 매핑이 없는 인터페이스 (Serializable 같은 외부 타입과 구분)
    known_interfaces: frozenset[str] = frozenset()
    constants: ConstantIndex = field(default_factory=ConstantIndex)

    def find(self, name: str) -> Optional[InterfaceContract]:
        return self.interfaces.get(name) or self.interfaces.get(name.rsplit(".", 1)[-1])

    def is_known(self, name: str) -> bool:
        return name in self.known_interfaces or name.rsplit(".", 1)[-1] in self.known_interfaces


@dataclass(frozen=True)
class Classification:
    kind: ContractKind
    interface_name: str = ""
    contract: Optional[InterfaceContract] = None


def has_mapped_methods(decl) -> bool:
    return any(has_annotation(m.annotations, MAPPING_ANNOTATIONS) for m in methods_of(decl))


def class_base_path(decl, constants: ConstantIndex, owner: str | None = None) -> str:
    """@RequestMapping 의 value/path (배열이면 첫 번째). 없으면 ""."""
    ann = find_annotation(getattr(decl, "annotations", None), AnnotationKind.REQUEST_MAPPING)
    if ann is None:
        return ""
    values = element_values(annotation_attr(ann, "value", "path"))
    if not values:
        return ""
    return constants.resolve(values[0], owner) or ""


def build_contract_index(units: Iterable) -> ContractIndex:
    units = list(units)
    constants = build_constant_index(units)

    interfaces: dict[str, InterfaceContract] = {}
    known: set[str] = set()
    for unit in units:
        pkg = package_name(unit)
        for qname, decl in iter_types(unit):
            if not is_interface(decl):
                continue
            known.add(decl.name)
            if not has_mapped_methods(decl):
                continue
            fqn = f"{pkg}.{qname}" if pkg else qname
            contract = InterfaceContract(
                name=decl.name,
                qualified_name=fqn,
                declaration=decl,
                base_path=class_base_path(decl, constants, decl.name),
            )
            if decl.name in interfaces:
                logger.debug("Duplicate interface %s, keeping %s", decl.name, interfaces[decl.name].qualified_name)
            interfaces.setdefault(decl.name, contract)
            interfaces.setdefault(fqn, contract)

    logger.debug("Indexed %d interface contracts, %d constants", len(interfaces), len(constants))
    return ContractIndex(
        interfaces=MappingProxyType(interfaces),
        known_interfaces=frozenset(known),
        constants=constants,
    )


def classify_controller(decl, index: ContractIndex, local_interfaces: Mapping[str, object] | None = None) -> list[Classification]:
    """
    구현한 인터페이스마다 하나씩 분류한다.
    같은 파일에 선언된 인터페이스도 인덱스와 같은 취급.
    """
    names = implemented_names(decl)
    if not names:
        return [Classification(ContractKind.NO_INTERFACE)]

    local_interfaces = local_interfaces or {}
    out: list[Classification] = []
    for name in names:
        contract = index.find(name)
        local = local_interfaces.get(name.rsplit(".", 1)[-1])
        if contract is None and local is not None and has_mapped_methods(local):
            contract = InterfaceContract(
                name=local.name,
                qualified_name=local.name,
                declaration=local,
                base_path=class_base_path(local, index.constants, local.name),
            )
        if contract is not None:
            out.append(Classification(ContractKind.INTERFACE_WITH_ANNOTATIONS, name, contract))
        elif local is not None or index.is_known(name):
            # 소스는 있지만 매핑이 없음: 계약이 아니다
            continue
        else:
            out.append(Classification(ContractKind.INTERFACE_WITHOUT_SOURCE, name))
    return out or [Classification(ContractKind.NO_INTERFACE)]

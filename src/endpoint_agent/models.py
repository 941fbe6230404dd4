"""스캔 결과 Pydantic 모델."""
from __future__ import annotations
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ParameterLocation(str, Enum):
    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    FORM_DATA = "formData"


class Parameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    required: bool = False
    type: str = "String"            # 선언된 타입 텍스트 그대로 (MultipartFile[] 등)
    schema_ref: Optional[str] = None


class MediaType(BaseModel):
    model_config = ConfigDict(frozen=True)

    schema_name: str


class RequestBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    required: bool = True
    description: Optional[str] = None
    content: dict[str, MediaType] = Field(default_factory=dict)


class Response(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = "Successful response"
    content: dict[str, MediaType] = Field(default_factory=dict)


class Endpoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_method: str                 # GET / POST / PUT / DELETE / PATCH
    path: str                        # /api/users/{id}
    operation_id: str
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    responses: dict[str, Response] = Field(default_factory=dict)
    request_body: Optional[RequestBody] = None
    controller_class: str
    method_name: str
    consumes: tuple[str, ...] = ()
    produces: tuple[str, ...] = ()
    deprecated: bool = False


class ScanResult(BaseModel):
    """
    스캔 1회(또는 마이크로서비스 1개)의 결과.
    endpoints / errors / warnings 는 append 만 한다.
    """
    project_path: str
    framework: str = "Spring"
    endpoints: list[Endpoint] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    scan_duration_ms: int = 0
    files_scanned: int = 0

    def add_endpoint(self, endpoint: Endpoint) -> None:
        self.endpoints.append(endpoint)

    def add_endpoints(self, endpoints: list[Endpoint]) -> None:
        self.endpoints.extend(endpoints)

    def add_error(self, error: str) -> None:
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: ScanResult, prefix: str | None = None) -> None:
        """다른 결과를 이어 붙인다. prefix 가 있으면 에러/경고 앞에 [prefix] 를 붙인다."""
        tag = f"[{prefix}] " if prefix else ""
        self.endpoints.extend(other.endpoints)
        self.errors.extend(f"{tag}{e}" for e in other.errors)
        self.warnings.extend(f"{tag}{w}" for w in other.warnings)
        self.files_scanned += other.files_scanned

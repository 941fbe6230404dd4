from __future__ import annotations
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScanSettings(BaseSettings):
    """스캔 1회분 설정. 호출자가 만들어서 파이프라인 전체에 그대로 넘긴다."""
    model_config = SettingsConfigDict(env_file=".env", env_prefix="ENDPOINT_AGENT_", extra="ignore")

    source_dirs: list[str] = Field(default_factory=lambda: ["src/main/java"])
    build_descriptors: list[str] = Field(
        default_factory=lambda: ["pom.xml", "build.gradle", "build.gradle.kts"]
    )
    skip_dirs: list[str] = Field(
        default_factory=lambda: ["target", "build", "out", "docs", "node_modules", ".gradle", "postman_collection"]
    )

    workers: int = Field(default=1, ge=1)
    microservices_output: Literal["merged", "separate"] = "merged"
    include_contract_endpoints: bool = False

    # --out 이 없을 때 결과를 쓸 디렉터리. None 이면 파일을 쓰지 않는다
    output_dir: Optional[Path] = None
    log_level: str = "INFO"

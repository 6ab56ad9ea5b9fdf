"""Application configuration."""

from pydantic import BaseModel


class Settings(BaseModel):
    """Application settings."""

    app_name: str = "FPB-AML Mapper API"
    app_version: str = "0.1.0"
    debug: bool = False
    cors_origins: list[str] = ["*"]
    api_prefix: str = "/api"
    max_body_bytes: int = 10 * 1024 * 1024

    # CAEX document header
    caex_file_name: str = "fpb-export.aml"
    origin_name: str = "fpb-aml-mapper"
    origin_id: str = "fpb-aml-mapper-1.0"
    origin_version: str = "0.1.0"

    # Project header emitted when converting AML back to FPB.JS JSON
    project_name: str = "FPBJS_Project"
    target_namespace: str = "http://www.hsu-ifa.de/fpbjs"

    # Nested FPD_Process containers deeper than this abort the conversion
    max_decomposition_depth: int = 64

    log_level: str = "INFO"


settings = Settings()

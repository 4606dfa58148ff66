"""Configuration for the ClickSend MCP server."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BUNDLED_SPEC_PATH = Path(__file__).parent / "openapi-specs.yaml"

DEFAULT_ENDPOINTS = ",".join(
    [
        "POST /v3/sms/send",
        "GET /v3/search/contacts-lists",
        "POST /v3/sms/price",
        "GET /v3/sms/templates",
        "GET /v3/statistics/sms",
        "GET /v3/sms/history",
    ]
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", extra="ignore"
    )

    service_name: str = Field(default="clicksend")

    clicksend_username: str = Field(default="")
    clicksend_api_key: str = Field(default="")
    clicksend_api_base_url: str = Field(default="https://rest.clicksend.com")
    clicksend_api_timeout_seconds: Optional[float] = Field(default=None)

    clicksend_spec_path: Path = Field(default=BUNDLED_SPEC_PATH)
    clicksend_endpoints: str = Field(default=DEFAULT_ENDPOINTS)

    mcp_transport: str = Field(default="stdio")
    mcp_host: str = Field(default="0.0.0.0")
    mcp_port: int = Field(default=8000)

    log_level: str = Field(default="INFO")

    def endpoint_allowlist(self) -> List[str]:
        return [item.strip() for item in self.clicksend_endpoints.split(",") if item.strip()]

    def has_credentials(self) -> bool:
        return bool(self.clicksend_username and self.clicksend_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

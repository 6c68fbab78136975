"""Settings snapshot model"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Read-only view of the persisted user configuration"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    clipboard_tracking: Literal["none", "all", "known", "custom"] = Field("known", alias="clipboardTracking")
    custom_domains: str = Field("", alias="customDomains")  # newline or comma separated
    github_integration: bool = Field(False, alias="githubIntegration")
    github_token: str = Field("", alias="githubToken")
    api_base_url: str = Field("https://api.github.com", alias="apiBaseUrl")
    request_timeout: float = Field(30.0, alias="requestTimeout")  # seconds, per fetch
    scan_interval: float = Field(0.5, alias="scanInterval")  # seconds between passes

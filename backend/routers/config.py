"""Configuration API endpoints"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ValidationError

from services.config_manager import ConfigManager
from services.errors import RequestFailed
from services.github_client import GitHubClient

router = APIRouter()


class ConfigUpdateRequest(BaseModel):
    """Request to update configuration"""

    clipboardTracking: Literal["none", "all", "known", "custom"] | None = None
    customDomains: str | None = None
    githubIntegration: bool | None = None
    githubToken: str | None = None
    apiBaseUrl: str | None = None
    requestTimeout: float | None = None
    scanInterval: float | None = None


class ConfigResponse(BaseModel):
    """Configuration response"""

    clipboardTracking: str
    customDomains: str
    githubIntegration: bool
    githubToken: str
    apiBaseUrl: str
    requestTimeout: float
    scanInterval: float


class ValidateResponse(BaseModel):
    """Validation response"""

    valid: bool
    message: str
    authenticated: bool


def mask_key(key: str) -> str:
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)
    return key[:4] + "*" * (len(key) - 8) + key[-4:]


@router.get("", response_model=ConfigResponse)
async def get_config() -> ConfigResponse:
    """Get current configuration"""
    settings = ConfigManager.get_instance().get_settings()
    config = settings.model_dump(by_alias=True)

    # Mask the token for security
    config["githubToken"] = mask_key(settings.github_token)

    return ConfigResponse(**config)


@router.put("")
async def update_config(request: ConfigUpdateRequest) -> dict[str, Any]:
    """Update configuration"""
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No configuration fields provided")

    try:
        ConfigManager.get_instance().save_config(updates)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid configuration: {e.errors()[0]['msg']}")
    except RuntimeError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"status": "success", "message": "Configuration updated"}


@router.post("/validate", response_model=ValidateResponse)
async def validate_config() -> ValidateResponse:
    """Validate the GitHub connection with the configured token"""
    settings = ConfigManager.get_instance().get_settings()
    client = GitHubClient.from_settings(settings)

    try:
        data = await client.fetch_json(client.rate_limit_url())
    except RequestFailed as e:
        return ValidateResponse(
            valid=False,
            message=f"Connection failed: {str(e)}",
            authenticated=bool(settings.github_token),
        )

    remaining = data.get("rate", {}).get("remaining") if isinstance(data, dict) else None
    return ValidateResponse(
        valid=True,
        message=f"Connected to {settings.api_base_url} ({remaining} requests remaining)",
        authenticated=bool(settings.github_token),
    )

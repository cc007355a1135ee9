"""
Bridge configuration and the manifest handed to the web frontend.
"""

import json
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

DEFAULT_START_URL = "https://dynamic-sdk-react-app.vercel.app/"
CONFIG_FILE = Path.home() / ".dynamic_bridge" / "config.json"

# Hex digits after the "0x" prefix, keyed by lower-cased chain name.
DEFAULT_ADDRESS_LENGTHS: dict[str, int] = {
    "sui": 64,
    "aptos": 64,
    "ethereum": 40,
    "eth": 40,
    "evm": 40,
    "polygon": 40,
    "matic": 40,
    "binance": 40,
    "bsc": 40,
    "bnb": 40,
    "avalanche": 40,
    "avax": 40,
    "arbitrum": 40,
    "optimism": 40,
    "base": 40,
}
DEFAULT_ADDRESS_LENGTH = 64


class Manifest(BaseModel):
    """Platform settings the frontend reads from the `manifest` query parameter."""
    platform: str = "browser"
    client_version: str = Field(default="1", alias="clientVersion")
    environment_id: str = Field(default="", alias="environmentId")
    app_origin: str = Field(default="appOrigin.com", alias="appOrigin")
    api_base_url: str = Field(default="", alias="apiBaseUrl")
    app_logo_url: str = Field(default="", alias="appLogoUrl")
    app_name: str = Field(default="", alias="appName")
    css_overrides: str = Field(default="", alias="cssOverrides")

    model_config = {"populate_by_name": True}

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), separators=(",", ":"))

    def is_valid(self) -> bool:
        return bool(self.environment_id and self.app_origin and self.app_name)


class BridgeConfig(BaseModel):
    # panel
    start_url: str = DEFAULT_START_URL
    manifest: Optional[Manifest] = None
    height_ratio: float = Field(default=0.6, ge=0.2, le=0.8)
    bottom_offset: float = Field(default=0.0, ge=0.0, le=0.3)
    transition_duration: float = 0.35
    enable_click_outside_to_close: bool = True
    enable_webview_preload: bool = True
    preload_delay: float = 1.0

    # queue / retry
    max_retry_attempts: int = 3
    retry_delay: float = 1.0
    queue_advance_delay: float = 0.5
    request_timeout: Optional[float] = None

    # logging
    enable_debug_logs: bool = True
    log_raw_messages: bool = False

    # deep links
    deeplink_scheme: str = "dynamicunity"

    # validation
    address_lengths: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_ADDRESS_LENGTHS))
    default_address_length: int = DEFAULT_ADDRESS_LENGTH
    max_amount: Optional[float] = 100000
    allowed_chains: Optional[list[str]] = None

    @property
    def resolved_start_url(self) -> str:
        """Start URL with the manifest appended, as loaded into the panel."""
        if self.manifest is None:
            return self.start_url
        return f"{self.start_url}?manifest={quote(self.manifest.to_json(), safe='')}"

    @property
    def base_url(self) -> str:
        return self.start_url.split("?", 1)[0]


def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    try:
        return json.loads((path or CONFIG_FILE).read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def save_config(cfg: dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


def config_from_file(path: Optional[Path] = None, **overrides: Any) -> BridgeConfig:
    """Build a BridgeConfig from the saved settings plus keyword overrides."""
    return BridgeConfig.model_validate({**load_config(path), **overrides})

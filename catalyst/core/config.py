"""Configuration management utilities."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GateConfig(BaseModel):
    """Thresholds for the bar confirmation gate."""

    model_config = ConfigDict(extra="forbid")

    vol_z_min: float = 2.0
    ret_1m_min: float = 0.02
    vwap_dev_min: float = 0.01
    window_size: int = Field(default=60, ge=2)


class SizingConfig(BaseModel):
    """Tunables for risk-based entry sizing."""

    model_config = ConfigDict(extra="forbid")

    min_notional: float = 50.0
    max_notional: float = 5_000.0
    min_price: float = 0.5
    lot_size: int = Field(default=1, ge=1)
    tick: float = Field(default=0.01, gt=0)
    stop_pct: float = 0.08
    stop_abs: float = 0.50
    min_risk_per_share: float = 0.01
    slippage_floor: float = 0.01
    slippage_bps: float = 5.0


class ExitConfig(BaseModel):
    """Exit policy thresholds."""

    model_config = ConfigDict(extra="forbid")

    trail_pct: float = 0.12
    target_pct: float = 0.50
    time_stop_minutes: float = 30.0
    time_stop_min_gain: float = 0.03


class Settings(BaseSettings):
    """Runtime settings loaded from the environment and ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=False)

    alert_threshold: float = Field(default=0.60, ge=0.0, le=1.0)
    vol_z_min: float = 2.0
    ret_1m_min: float = 0.02
    vwap_dev_min: float = 0.01
    vol_window_size: int = Field(default=60, ge=2)
    poll_news_seconds: int = Field(default=60, ge=5)
    news_lookback_minutes: int = Field(default=180, ge=1)
    starting_cash: float = 100_000.0
    risk_pct: float = Field(default=0.01, gt=0.0, le=1.0)
    sizing_equity: float = 10_000.0
    marketaux_api_key: Optional[str] = None
    fmp_api_key: Optional[str] = None
    discord_webhook_url: Optional[str] = None
    db_path: Path = Path("data/events.db")
    fills_dir: Path = Path("logs")
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()

    def gate_config(self) -> GateConfig:
        return GateConfig(
            vol_z_min=self.vol_z_min,
            ret_1m_min=self.ret_1m_min,
            vwap_dev_min=self.vwap_dev_min,
            window_size=self.vol_window_size,
        )


class AppConfig(BaseModel):
    """Full configuration tree, optionally overlaid from a YAML file."""

    model_config = ConfigDict(extra="forbid")

    settings: Settings = Field(default_factory=Settings)
    gate: GateConfig = Field(default_factory=GateConfig)
    sizing: SizingConfig = Field(default_factory=SizingConfig)
    exits: ExitConfig = Field(default_factory=ExitConfig)

    @model_validator(mode="before")
    @classmethod
    def _gate_from_settings(cls, values):
        if isinstance(values, dict) and values.get("gate") is None:
            values = dict(values)
            settings = values.get("settings")
            if settings is None:
                settings = Settings()
            elif isinstance(settings, dict):
                settings = Settings(**settings)
            if isinstance(settings, Settings):
                values["settings"] = settings
                values["gate"] = settings.gate_config()
        return values


def _read_config_payload(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    payload = yaml.safe_load(text) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"config root must be a mapping: {path}")
    return payload


def load_config(path: Path | str | None = None) -> AppConfig:
    """Load configuration from ``path`` on top of environment settings.

    Gate thresholds fall back to the environment values when the file does
    not provide a ``gate`` section.
    """

    payload: Dict[str, Any] = {}
    if path is not None:
        payload = _read_config_payload(Path(path))
    return AppConfig(**payload)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return process-wide settings (cached)."""

    return Settings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()


__all__ = [
    "AppConfig",
    "ExitConfig",
    "GateConfig",
    "Settings",
    "SizingConfig",
    "get_settings",
    "load_config",
    "reset_settings_cache",
]

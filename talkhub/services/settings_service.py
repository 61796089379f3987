from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from talkhub.logging_config import get_logger
from talkhub.models import Setting
from talkhub.services.errors import GatewayNotConfiguredError, UnknownSettingError

logger = get_logger("settings_service")

EVOLUTION_API_URL = "evolution_api_url"
EVOLUTION_API_KEY = "evolution_api_key"
BOT_ENABLED = "bot_enabled"
BOT_GREETING = "bot_greeting"

SETTING_DESCRIPTIONS = {
    EVOLUTION_API_URL: "Evolution API base URL",
    EVOLUTION_API_KEY: "Evolution API key",
    BOT_ENABLED: "Enable keyword auto-responses",
    BOT_GREETING: "Default greeting text",
}

_FALSE_VALUES = {"0", "false", "no", "off"}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _is_enabled(value: Optional[str]) -> bool:
    if value is None:
        return True
    return value.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True)
class HubSettings:
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    bot_enabled: bool = True
    bot_greeting: Optional[str] = None

    @classmethod
    def from_rows(cls, values: dict[str, Optional[str]]) -> "HubSettings":
        api_url = _clean(values.get(EVOLUTION_API_URL))
        return cls(
            api_url=api_url.rstrip("/") if api_url else None,
            api_key=_clean(values.get(EVOLUTION_API_KEY)),
            bot_enabled=_is_enabled(values.get(BOT_ENABLED)),
            bot_greeting=values.get(BOT_GREETING),
        )

    @property
    def gateway_configured(self) -> bool:
        return bool(self.api_url and self.api_key)

    def require_gateway(self) -> tuple[str, str]:
        """Return (api_url, api_key) or raise when the gateway is not configured."""
        if not self.gateway_configured:
            raise GatewayNotConfiguredError()
        return self.api_url, self.api_key


def load_hub_settings(db: Session) -> HubSettings:
    rows = db.query(Setting).filter(Setting.key.in_(list(SETTING_DESCRIPTIONS))).all()
    return HubSettings.from_rows({row.key: row.value for row in rows})


def list_settings(db: Session) -> dict[str, Optional[str]]:
    rows = db.query(Setting).filter(Setting.key.in_(list(SETTING_DESCRIPTIONS))).all()
    values: dict[str, Optional[str]] = {key: None for key in SETTING_DESCRIPTIONS}
    for row in rows:
        values[row.key] = row.value
    return values


def update_setting(db: Session, key: str, value: Optional[str]) -> Setting:
    """Write one recognized setting, creating the row when missing."""
    if key not in SETTING_DESCRIPTIONS:
        raise UnknownSettingError(f"Unknown setting '{key}'")

    now = datetime.now(timezone.utc)
    row = db.query(Setting).filter(Setting.key == key).first()
    if row is None:
        row = Setting(key=key, value=value, description=SETTING_DESCRIPTIONS[key], created_at=now, updated_at=now)
        db.add(row)
    else:
        row.value = value
        row.updated_at = now
    db.flush()
    logger.info("Setting updated", extra={"context": {"key": key}})
    return row

import os
import json
import logging
from datetime import date
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from dotenv import load_dotenv

load_dotenv()

# Annual days granted per leave type. LOP is unpaid and comp-off is earned, so neither is entitled.
DEFAULT_LEAVE_ENTITLEMENTS: Dict[str, float] = {
    "pto": 12,
    "lop": 0,
    "comp-off": 0,
    "sick": 6,
    "vacation": 0,
    "personal": 0,
    "maternity": 90,
    "paternity": 7,
    "bereavement": 3,
    "other": 0,
}


class BlackoutWindow(BaseModel):
    start: date
    end: date


def _load_blackout_windows() -> List[BlackoutWindow]:
    raw = os.getenv("LEAVE_BLACKOUT_DATES")
    if not raw:
        return []
    return [BlackoutWindow(**window) for window in json.loads(raw)]


def _load_entitlements() -> Dict[str, float]:
    overrides = os.getenv("LEAVE_ENTITLEMENTS")
    table = dict(DEFAULT_LEAVE_ENTITLEMENTS)
    if overrides:
        table.update({k: float(v) for k, v in json.loads(overrides).items()})
    return table


class EmailSettings(BaseModel):
    enabled: bool = Field(default=os.getenv("EMAIL_ENABLED", "false").lower() == "true")
    from_address: str = Field(default=os.getenv("AWS_SES_FROM_EMAIL", "no-reply@hrms.local"))
    aws_region: Optional[str] = Field(default=os.getenv("AWS_REGION"))
    app_url: str = Field(default=os.getenv("APP_URL", "http://localhost:3000"))


class AttendancePolicy(BaseModel):
    standard_work_hours: float = float(os.getenv("STANDARD_WORK_HOURS", "8"))
    half_day_threshold_hours: float = float(os.getenv("HALF_DAY_THRESHOLD_HOURS", "5"))
    # Python weekday numbers, Monday=0. Sunday is not a working day.
    working_weekdays: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4, 5])
    reminder_hour: int = 23
    reminder_from_minute: int = 30
    auto_checkout_hour: int = 0
    auto_checkout_until_minute: int = 5


class LeavePolicySettings(BaseModel):
    entitlements: Dict[str, float] = Field(default_factory=_load_entitlements)
    probation_months: int = int(os.getenv("PROBATION_MONTHS", "3"))
    blackout_dates: List[BlackoutWindow] = Field(default_factory=_load_blackout_windows)


class Config(BaseModel):
    app_name: str = "HRMS API"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hrms.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24 hours
    cron_secret: Optional[str] = os.getenv("CRON_SECRET")

    # Wall clock used by the HTTP layer; stored datetimes are naive local times.
    timezone: str = os.getenv("APP_TIMEZONE", "UTC")

    rate_limit_enabled: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    check_in_rate_limit: str = os.getenv("CHECK_IN_RATE_LIMIT", "10/minute")

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    email: EmailSettings = EmailSettings()
    attendance: AttendancePolicy = AttendancePolicy()
    leave: LeavePolicySettings = LeavePolicySettings()

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    _critical_missing = []
    if "dev-only" in settings.secret_key:
        _critical_missing.append("SECRET_KEY")
    if not settings.cron_secret:
        _critical_missing.append("CRON_SECRET")
    if _critical_missing:
        raise RuntimeError(
            f"FATAL: The following secrets must be set for non-development environments: "
            f"{', '.join(_critical_missing)}. Set them as environment variables."
        )
else:
    if "dev-only" in settings.secret_key:
        _logger.warning("⚠ Using insecure default SECRET_KEY; only acceptable in development.")

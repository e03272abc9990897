"""
Configuration data models for tasktrack.

These models define the structure of .tasktrack.json and
~/.config/tasktrack/config.json files, with validation and type safety via
Pydantic. Environment variables (SMTP_HOST, REMINDER_EMAIL, TIMEZONE, ...)
are layered on top by the loader.
"""

import re
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TIMEZONE = "UTC"

_SEND_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class DatabaseConfig(BaseModel):
    """Location of the single-file SQLite database."""

    path: str = Field(
        default="tasktrack.db",
        description="Path to the SQLite database file (relative to the working directory)",
    )


class MailConfig(BaseModel):
    """
    SMTP transport settings for the reminder digest.

    All fields are optional so the server starts without them; dispatch
    fails gracefully until a host is configured.
    """

    model_config = ConfigDict(validate_assignment=True)

    host: str | None = Field(default=None, description="SMTP server host")
    port: int = Field(default=587, ge=1, le=65535, description="SMTP server port")
    user: str | None = Field(default=None, description="SMTP login user")
    password: str | None = Field(default=None, description="SMTP login password")
    sender: str | None = Field(
        default=None,
        description="From address; defaults to the SMTP user",
    )
    use_tls: bool = Field(
        default=False,
        description="Connect with implicit TLS (SMTPS) instead of STARTTLS",
    )
    timeout: float = Field(default=10.0, gt=0, description="Socket timeout in seconds")

    @property
    def is_configured(self) -> bool:
        """True when enough settings exist to attempt a connection."""
        return bool(self.host)

    @property
    def from_address(self) -> str | None:
        """Envelope sender used for outgoing mail."""
        return self.sender or self.user


class ReminderConfig(BaseModel):
    """
    Schedule and recipient for the daily deadline digest.

    Example:
        >>> ReminderConfig(send_time="08:30", timezone="Europe/Helsinki").send_time
        '08:30'
    """

    model_config = ConfigDict(validate_assignment=True)

    recipient: str | None = Field(default=None, description="Digest recipient address")
    send_time: str = Field(default="20:45", description="Daily send time as HH:MM")
    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA timezone for the send time and the target date",
    )
    enabled: bool = Field(default=True, description="Run the daily scheduler")

    @field_validator("send_time")
    @classmethod
    def validate_send_time(cls, v: str) -> str:
        if not _SEND_TIME_RE.match(v.strip()):
            raise ValueError(f"send_time must be HH:MM, got {v!r}")
        return v.strip()

    @field_validator("timezone", mode="before")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_TIMEZONE
        name = str(v).strip()
        try:
            ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {name}") from e
        return name

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def hour_minute(self) -> tuple[int, int]:
        hour, minute = self.send_time.split(":")
        return int(hour), int(minute)


class ServerConfig(BaseModel):
    """HTTP server settings used by `tasktrack serve`."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=5000, ge=1, le=65535, description="Bind port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )


class TrackerConfig(BaseModel):
    """
    Top-level configuration.

    Passed explicitly to the API factory, the reminder job and the scheduler.

    Example:
        >>> config = TrackerConfig()
        >>> config.reminder.timezone
        'UTC'
        >>> config.mail.is_configured
        False
    """

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    reminder: ReminderConfig = Field(default_factory=ReminderConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

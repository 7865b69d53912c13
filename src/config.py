"""Configuration and shared settings."""

__version__ = "0.1.0"

import os
import secrets
import sys
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

_TOKEN_PLACEHOLDERS = ("", "your_token_here")

DEFAULT_PORT = 5000
SESSION_MAX_AGE_SECONDS = 24 * 60 * 60


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _split_origins(raw: str) -> List[str]:
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


@dataclass
class StaffConfig:
    """Single staff account; both fields empty means the development default."""

    username: str = ""
    password_hash: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password_hash)


@dataclass
class DiscordConfig:
    token: str = ""

    @property
    def is_configured(self) -> bool:
        return self.token not in _TOKEN_PLACEHOLDERS


@dataclass
class SessionConfig:
    secret: str = ""
    max_age_seconds: int = SESSION_MAX_AGE_SECONDS

    @property
    def has_explicit_secret(self) -> bool:
        return bool(self.secret)


@dataclass
class AppConfig:
    """Typed dashboard configuration."""

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    environment: str = "development"
    messages_file: str = "messages.json"
    static_dir: str = "public"
    allowed_origins: List[str] = field(default_factory=list)
    staff: StaffConfig = field(default_factory=StaffConfig)
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins(self) -> List[str]:
        origins = [f"http://localhost:{self.port}"]
        for origin in self.allowed_origins:
            if origin not in origins:
                origins.append(origin)
        return origins

    def session_secret(self) -> str:
        """Configured secret, or a throwaway one for local development."""
        if self.session.secret:
            return self.session.secret
        return f"dev-session-secret-{secrets.token_hex(16)}"

    def production_problems(self) -> List[str]:
        """Settings a production deployment must not run without."""
        if not self.is_production:
            return []
        problems = []
        if not self.session.has_explicit_secret:
            problems.append("Production requires SESSION_SECRET environment variable")
        if not self.staff.is_configured:
            problems.append(
                "Production requires STAFF_USERNAME and STAFF_PASSWORD_HASH environment variables"
            )
        return problems

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        port_raw = _env("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_raw)
        except ValueError:
            _stderr_print(f"Invalid PORT={port_raw!r}, falling back to {DEFAULT_PORT}")
            port = DEFAULT_PORT
        return cls(
            port=port,
            host=_env("HOST", "0.0.0.0"),
            environment=(_env("APP_ENV") or _env("NODE_ENV") or "development").lower(),
            messages_file=_env("MESSAGES_FILE", "messages.json"),
            static_dir=_env("STATIC_DIR", "public"),
            allowed_origins=_split_origins(_env("ALLOWED_ORIGINS")),
            staff=StaffConfig(
                username=_env("STAFF_USERNAME"),
                password_hash=_env("STAFF_PASSWORD_HASH"),
            ),
            discord=DiscordConfig(token=_env("DISCORD_BOT_TOKEN")),
            session=SessionConfig(secret=_env("SESSION_SECRET")),
        )

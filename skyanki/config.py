# skyanki/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .anki import DEFAULT_URL


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise RuntimeError(f"{name} is not set")
    return value


@dataclass(frozen=True)
class Settings:
    username: str
    password: str = field(repr=False)
    student_id: int
    database_url: str = field(repr=False)
    anki_url: str = DEFAULT_URL
    deck: str = "Skyeng"
    model: str = "Basic"
    language: str = "ru"
    timezone: str = "Europe/Moscow"
    http_timeout: float = 30

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        student = _required(env, "SKYENG_STUDENT")
        try:
            student_id = int(student)
        except ValueError:
            raise RuntimeError(f"SKYENG_STUDENT must be numeric, got {student!r}") from None
        timeout = env.get("HTTP_TIMEOUT", "30")
        try:
            http_timeout = float(timeout)
        except ValueError:
            raise RuntimeError(f"HTTP_TIMEOUT must be numeric, got {timeout!r}") from None
        return cls(
            username=_required(env, "SKYENG_USERNAME"),
            password=_required(env, "SKYENG_PASSWORD"),
            student_id=student_id,
            database_url=_required(env, "DATABASE_URL"),
            anki_url=env.get("ANKI_URL", DEFAULT_URL),
            deck=env.get("ANKI_DECK", "Skyeng"),
            model=env.get("ANKI_MODEL", "Basic"),
            language=env.get("SKYENG_LANGUAGE", "ru"),
            timezone=env.get("SYNC_TZ", "Europe/Moscow"),
            http_timeout=http_timeout,
        )

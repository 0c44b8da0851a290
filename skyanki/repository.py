# skyanki/repository.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import pytz
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import Execution, TokenRow, Word
from .schema import Token

EXECUTION_ROW_ID = 1


def millis_to_datetime(ms: int) -> datetime:
    seconds, millis = divmod(ms, 1000)
    return datetime.fromtimestamp(seconds, tz=pytz.utc).replace(microsecond=millis * 1000)


def datetime_to_millis(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return round(dt.timestamp() * 1000)


class Repository:
    """Token, watermark and exported words, keyed by natural identity."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def get_token(self, login: str) -> Optional[Token]:
        async with self._sessionmaker() as db:
            res = await db.execute(select(TokenRow).where(TokenRow.login == login))
            row = res.scalar_one_or_none()
        if row is None:
            return None
        return Token(value=row.value, expires_at=datetime_to_millis(row.expires_at))

    async def save_token(self, login: str, token: Token) -> None:
        values = {"login": login, "value": token.value, "expires_at": millis_to_datetime(token.expires_at)}
        stmt = insert(TokenRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["login"],
            set_={"value": stmt.excluded.value, "expires_at": stmt.excluded.expires_at},
        )
        async with self._sessionmaker() as db:
            await db.execute(stmt)
            await db.commit()

    async def get_last_update(self) -> Optional[str]:
        # also reads legacy tables keyed on last_update, which have no id
        async with self._sessionmaker() as db:
            res = await db.execute(select(func.max(Execution.last_update)))
            return res.scalar_one_or_none()

    async def save_last_update(self, last_update: str) -> None:
        stmt = insert(Execution).values(id=EXECUTION_ROW_ID, last_update=last_update)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={"last_update": stmt.excluded.last_update},
        )
        async with self._sessionmaker() as db:
            await db.execute(stmt)
            await db.commit()

    async def save_word(self, record: Dict[str, Any]) -> None:
        # first writer wins, a re-run never overwrites an exported word
        stmt = insert(Word).values(**record).on_conflict_do_nothing(
            index_elements=["student_id", "wordset_id", "word_id"]
        )
        async with self._sessionmaker() as db:
            await db.execute(stmt)
            await db.commit()

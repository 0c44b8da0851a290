# skyanki/models.py
from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from .db_pg import Base


# one row per Skyeng login; only the token pair is stored, never the password
class TokenRow(Base):
    __tablename__ = "token"
    login: Mapped[str] = mapped_column(String(256), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# Last run watermark: highest words.created_at already exported.
# Single row (id = 1); could also be derived as max(words.created_at).
class Execution(Base):
    __tablename__ = "execution"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    last_update: Mapped[str] = mapped_column(String(64), nullable=False)


class Word(Base):
    __tablename__ = "words"

    student_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    wordset_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    word_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)  # meaning id

    title: Mapped[str] = mapped_column(Text, nullable=False)
    subtitle: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # full meaning payload as returned by the dictionary API
    meaning: Mapped[dict] = mapped_column(JSONB, nullable=False)

    # kept as the API's ISO-8601 string, compared lexicographically
    created_at: Mapped[str] = mapped_column(String(64), nullable=False)
    exported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

# skyanki/schema.py
from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    # the service speaks camelCase; python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Token(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False)
    expires_at: int  # epoch millis

    def is_valid(self, now_ms: int) -> bool:
        return self.expires_at > now_ms


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)


class PageMeta(ApiModel):
    total: int = 0
    current_page: int
    last_page: int
    page_size: int = 0


class Page(ApiModel, Generic[T]):
    data: List[T] = Field(default_factory=list)
    meta: PageMeta


class WordSetDescriptor(ApiModel):
    id: int
    title: str = ""
    subtitle: Optional[str] = ""


class WordRecord(ApiModel):
    meaning_id: int
    created_at: str


class WordOfSet(BaseModel):
    word_set: WordSetDescriptor
    word: WordRecord


class Translation(ApiModel):
    text: str = ""
    note: Optional[str] = None


class Definition(ApiModel):
    text: str = ""
    sound_url: Optional[str] = None


class Example(ApiModel):
    text: str = ""
    sound_url: Optional[str] = None


class Image(ApiModel):
    url: str


class Alternative(ApiModel):
    text: str = ""
    translation: Optional[Translation] = None


class Meaning(ApiModel):
    id: int
    text: str
    transcription: str = ""
    translation: Translation = Field(default_factory=Translation)
    definition: Definition = Field(default_factory=Definition)
    examples: List[Example] = Field(default_factory=list)
    images: List[Image] = Field(default_factory=list)
    sound_url: Optional[str] = None
    alternatives: Optional[List[Alternative]] = Field(default=None, alias="alternativeTranslations")

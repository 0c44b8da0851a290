# skyanki/skyeng_client.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .auth import AuthSession, now_ms
from .errors import DeserializationError, raise_for_status
from .pagination import PAGE_SIZE, collect_pages
from .schema import Meaning, Page, WordOfSet, WordRecord, WordSetDescriptor

LOGGER = logging.getLogger(__name__)

WORDS_API = "https://api.words.skyeng.ru/api"
WORDSETS_URL = f"{WORDS_API}/for-vimbox/v1/wordsets.json"
WORDS_URL = WORDS_API + "/v1/wordsets/{wordset_id}/words.json"
MEANINGS_URL = "https://dictionary.skyeng.ru/api/for-services/v2/meanings"

T = TypeVar("T")

_MEANINGS = TypeAdapter(List[Meaning])


def _validate(body: bytes, text: str, validate: Callable[[bytes], T]) -> T:
    try:
        return validate(body)
    except ValidationError as e:
        raise DeserializationError(e, text) from e


class SkyengClient:
    def __init__(
        self,
        session: AuthSession,
        *,
        page_size: int = PAGE_SIZE,
        accept_language: str = "ru",
        clock: Callable[[], int] = now_ms,
    ):
        self._session = session
        self.page_size = page_size
        self.accept_language = accept_language
        self._clock = clock

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        # resolved per request, a long listing may cross the token expiry
        token = await self._session.ensure_valid()
        headers = {"accept": "application/json", "authorization": f"Bearer {token.value}"}
        res = await self._session.request("GET", url, params=params, headers=headers)
        raise_for_status(res.status_code, f"GET {url} failed with status {res.status_code}")
        return res

    async def _get_page(self, url: str, params: Dict[str, Any], item_type: Type[T]) -> Page[T]:
        res = await self._get(url, params)
        return _validate(res.content, res.text, Page[item_type].model_validate_json)  # type: ignore[valid-type]

    async def list_word_sets(self, student_id: int) -> List[WordSetDescriptor]:
        async def fetch(page: int) -> Page[WordSetDescriptor]:
            params = {"page": page, "pageSize": self.page_size, "studentId": student_id}
            return await self._get_page(WORDSETS_URL, params, WordSetDescriptor)

        word_sets = await collect_pages(fetch)
        LOGGER.info("Student %s has %d word sets", student_id, len(word_sets))
        return word_sets

    async def list_words_of_set(self, student_id: int, word_set: WordSetDescriptor) -> List[WordOfSet]:
        url = WORDS_URL.format(wordset_id=word_set.id)

        async def fetch(page: int) -> Page[WordRecord]:
            params = {
                "page": page,
                "pageSize": self.page_size,
                "studentId": student_id,
                "acceptLanguage": self.accept_language,
                "noCache": self._clock(),
            }
            return await self._get_page(url, params, WordRecord)

        words = await collect_pages(fetch)
        return [WordOfSet(word_set=word_set, word=w) for w in words]

    async def list_words(self, student_id: int) -> List[WordOfSet]:
        """Every word of every word set, tagged with its set, in listing order."""
        out: List[WordOfSet] = []
        for word_set in await self.list_word_sets(student_id):
            words = await self.list_words_of_set(student_id, word_set)
            LOGGER.debug("Word set %s (%s): %d words", word_set.id, word_set.title, len(words))
            out.extend(words)
        LOGGER.info("Fetched %d words", len(out))
        return out

    async def get_meanings(self, meaning_ids: Iterable[int]) -> List[Meaning]:
        ids = [str(i) for i in meaning_ids]
        if not ids:
            return []
        res = await self._get(MEANINGS_URL, {"ids": ",".join(ids)})
        return _validate(res.content, res.text, _MEANINGS.validate_json)

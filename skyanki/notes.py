# skyanki/notes.py
from __future__ import annotations

import html
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from .attachments import absolute_url, url_to_filename
from .schema import Meaning, WordOfSet

MASK = "[...]"
BASE_TAG = "skyeng"

_BRACKETED = re.compile(r"\[[^\]]*\]")  # examples mark the target word as [word]
_NON_TAG = re.compile(r"\W+")


def mask(text: str, word: str) -> str:
    out = _BRACKETED.sub(MASK, text or "")
    if word:
        out = re.sub(rf"(?<!\w){re.escape(word)}(?!\w)", MASK, out, flags=re.IGNORECASE)
    return out


def tag_for(title: str) -> str:
    return _NON_TAG.sub("_", (title or "").strip().lower()).strip("_")


def _media(url: str, field: str) -> Dict[str, Any]:
    url = absolute_url(url)
    return {"url": url, "filename": url_to_filename(url), "fields": [field]}


def _front(meaning: Meaning) -> str:
    word = meaning.text
    lines: List[str] = []
    if meaning.transcription:
        lines.append(f"[{html.escape(meaning.transcription)}]")
    if meaning.definition.text:
        lines.append(html.escape(mask(meaning.definition.text, word)))
    for example in meaning.examples:
        if example.text:
            lines.append(f"<i>{html.escape(mask(example.text, word))}</i>")
    return "<br>".join(lines)


def _back(meaning: Meaning) -> str:
    lines = [f"<b>{html.escape(meaning.text)}</b>"]
    if meaning.translation.text:
        lines.append(html.escape(meaning.translation.text))
    alternatives = [
        a.translation.text
        for a in (meaning.alternatives or [])
        if a.translation and a.translation.text
    ]
    if alternatives:
        lines.append(f"<small>{html.escape(', '.join(alternatives))}</small>")
    return "<br>".join(lines)


def build_note(item: WordOfSet, meaning: Meaning, *, deck: str, model: str = "Basic") -> Dict[str, Any]:
    """AnkiConnect ``addNote`` payload for one harvested word."""
    tags = [BASE_TAG]
    set_tag = tag_for(item.word_set.title)
    if set_tag:
        tags.append(set_tag)

    note: Dict[str, Any] = {
        "deckName": deck,
        "modelName": model,
        "fields": {"Front": _front(meaning), "Back": _back(meaning)},
        "tags": tags,
        "options": {"allowDuplicate": False, "duplicateScope": "deck"},
    }

    audio = []
    if meaning.sound_url:
        audio.append(_media(meaning.sound_url, "Back"))
    if meaning.definition.sound_url:
        audio.append(_media(meaning.definition.sound_url, "Front"))
    if audio:
        note["audio"] = audio
    if meaning.images:
        note["picture"] = [_media(meaning.images[0].url, "Back")]
    return note


def build_word_record(
    student_id: int,
    item: WordOfSet,
    meaning: Meaning,
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Row for the ``words`` table."""
    return {
        "student_id": student_id,
        "wordset_id": item.word_set.id,
        "word_id": item.word.meaning_id,
        "title": item.word_set.title,
        "subtitle": item.word_set.subtitle or "",
        "meaning": meaning.model_dump(mode="json", by_alias=True),
        "created_at": item.word.created_at,
        "exported_at": exported_at,
    }

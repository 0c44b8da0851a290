# skyanki/main.py
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime
from functools import partial
from typing import List, Optional

import pytz

from .anki import AnkiConnect
from .auth import AuthSession
from .config import Settings
from .db_pg import init_db, make_engine, make_sessionmaker
from .errors import AnkiConnectError, SkyankiError
from .notes import build_note, build_word_record
from .repository import Repository
from .schema import Credentials
from .skyeng_client import SkyengClient
from .sync import created_after, last_created

LOGGER = logging.getLogger("skyanki")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ───────── Sync pass ─────────
async def sync_once(
    settings: Settings,
    skyeng: SkyengClient,
    anki: AnkiConnect,
    repo: Repository,
    *,
    dry_run: bool = False,
    since: Optional[str] = None,
) -> int:
    """Export words created since the watermark; returns how many notes were added.

    Any failure propagates before the watermark is saved, so the next run
    starts again from the last good point.
    """
    watermark = since if since is not None else await repo.get_last_update()
    LOGGER.info("Exporting words created after %s", watermark or "<beginning>")

    words = await skyeng.list_words(settings.student_id)
    new_words = created_after(words, watermark)
    if not new_words:
        LOGGER.info("No new words")
        return 0
    LOGGER.info("%d new words of %d", len(new_words), len(words))

    meaning_ids = list(dict.fromkeys(item.word.meaning_id for item in new_words))
    meanings = {m.id: m for m in await skyeng.get_meanings(meaning_ids)}

    if dry_run:
        for item in new_words:
            meaning = meanings.get(item.word.meaning_id)
            LOGGER.info(
                "Would export %s from '%s'",
                meaning.text if meaning else f"#{item.word.meaning_id} (no meaning)",
                item.word_set.title,
            )
        return 0

    tz = pytz.timezone(settings.timezone)
    await anki.create_deck(settings.deck)

    added = 0
    for item in new_words:
        meaning = meanings.get(item.word.meaning_id)
        if meaning is None:
            LOGGER.warning("No meaning returned for #%s, skipping", item.word.meaning_id)
            continue

        note = build_note(item, meaning, deck=settings.deck, model=settings.model)
        try:
            note_id = await anki.add_note(note)
        except AnkiConnectError as e:
            if not e.is_duplicate:
                raise
            LOGGER.warning("'%s' is already in deck %s", meaning.text, settings.deck)
        else:
            added += 1
            LOGGER.info("Added '%s' (note %s)", meaning.text, note_id)

        await repo.save_word(build_word_record(settings.student_id, item, meaning, datetime.now(tz)))

    await anki.sync()

    new_watermark = last_created(new_words)
    if new_watermark:
        await repo.save_last_update(new_watermark)
        LOGGER.info("Watermark moved to %s", new_watermark)
    return added


# ───────── Wiring ─────────
async def run(settings: Settings, *, dry_run: bool = False, since: Optional[str] = None) -> int:
    engine = make_engine(settings.database_url)
    try:
        await init_db(engine)
        repo = Repository(make_sessionmaker(engine))

        token = await repo.get_token(settings.username)
        credentials = Credentials(username=settings.username, password=settings.password)
        session = AuthSession(
            credentials,
            token,
            on_token_change=partial(repo.save_token, settings.username),
            timeout=settings.http_timeout,
        )
        async with session, AnkiConnect(settings.anki_url, timeout=settings.http_timeout) as anki:
            skyeng = SkyengClient(session, accept_language=settings.language)
            return await sync_once(settings, skyeng, anki, repo, dry_run=dry_run, since=since)
    finally:
        await engine.dispose()


# ───────── CLI ─────────
def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export new Skyeng words to Anki")
    parser.add_argument("--dry-run", action="store_true", help="fetch and filter only, touch neither Anki nor the watermark")
    parser.add_argument("--since", default=None, help="override the stored watermark (ISO-8601, as the API returns it)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING... (default: $LOG_LEVEL or INFO)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
    )

    try:
        settings = Settings.from_env()
        added = asyncio.run(run(settings, dry_run=args.dry_run, since=args.since))
    except (SkyankiError, RuntimeError) as e:
        LOGGER.error("Sync failed: %s", e)
        return 1

    LOGGER.info("Done, %d notes added", added)
    return 0


if __name__ == "__main__":
    sys.exit(main())

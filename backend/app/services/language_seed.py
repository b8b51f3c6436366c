"""Reference languages shipped with the service.

Run ``python -m app.services.language_seed`` to load them into the configured
database. Existing rows are matched by code and updated in place.
"""

from __future__ import annotations

import argparse
import logging
import sys

from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker

from app.database import SessionLocal
from app.models import Language

logger = logging.getLogger(__name__)

# (code, name, native name, flag, popularity)
LANGUAGES: tuple[tuple[str, str, str, str, int], ...] = (
    ("en", "English", "English", "\U0001F1EC\U0001F1E7", 1000),
    ("es", "Spanish", "Español", "\U0001F1EA\U0001F1F8", 900),
    ("fr", "French", "Français", "\U0001F1EB\U0001F1F7", 800),
    ("de", "German", "Deutsch", "\U0001F1E9\U0001F1EA", 750),
    ("zh", "Chinese (Simplified)", "中文", "\U0001F1E8\U0001F1F3", 950),
    ("ja", "Japanese", "日本語", "\U0001F1EF\U0001F1F5", 700),
    ("ko", "Korean", "한국어", "\U0001F1F0\U0001F1F7", 650),
    ("ru", "Russian", "Русский", "\U0001F1F7\U0001F1FA", 600),
    ("it", "Italian", "Italiano", "\U0001F1EE\U0001F1F9", 550),
    ("pt", "Portuguese", "Português", "\U0001F1F5\U0001F1F9", 500),
    ("ar", "Arabic", "العربية", "\U0001F1F8\U0001F1E6", 450),
    ("hi", "Hindi", "हिन्दी", "\U0001F1EE\U0001F1F3", 400),
    ("nl", "Dutch", "Nederlands", "\U0001F1F3\U0001F1F1", 350),
    ("el", "Greek", "Ελληνικά", "\U0001F1EC\U0001F1F7", 300),
    ("tr", "Turkish", "Türkçe", "\U0001F1F9\U0001F1F7", 250),
    ("vi", "Vietnamese", "Tiếng Việt", "\U0001F1FB\U0001F1F3", 200),
    ("pl", "Polish", "Polski", "\U0001F1F5\U0001F1F1", 150),
    ("th", "Thai", "ไทย", "\U0001F1F9\U0001F1ED", 100),
    ("sv", "Swedish", "Svenska", "\U0001F1F8\U0001F1EA", 50),
    ("no", "Norwegian", "Norsk", "\U0001F1F3\U0001F1F4", 25),
)


def seed_languages(db: Session) -> tuple[int, int]:
    """Insert or refresh the reference languages; returns ``(created, updated)``."""

    existing = {language.code: language for language in db.execute(select(Language)).scalars()}
    created = updated = 0
    for code, name, native_name, flag, popularity in LANGUAGES:
        language = existing.get(code)
        if language is None:
            db.add(
                Language(
                    code=code,
                    name=name,
                    native_name=native_name,
                    flag=flag,
                    popularity=popularity,
                )
            )
            created += 1
            continue
        language.name = name
        language.native_name = native_name
        language.flag = flag
        language.popularity = popularity
        updated += 1
    db.commit()
    return created, updated


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL to seed instead of the configured database",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    factory = SessionLocal
    if args.database_url:
        factory = sessionmaker(bind=create_engine(args.database_url), autoflush=False)
    with factory() as db:
        created, updated = seed_languages(db)
    logger.info("Seeded languages: %d created, %d updated", created, updated)
    return 0


if __name__ == "__main__":
    sys.exit(main())

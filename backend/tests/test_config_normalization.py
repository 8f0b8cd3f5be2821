"""Unit tests for settings normalization.

Hosting providers hand out plain ``postgresql://`` URLs with libpq-style
``sslmode``; the async engine needs the asyncpg driver and its ``ssl`` flag.
"""

from app.config import Settings


def test_database_url_gets_async_driver():
    settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/posterhub")

    assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/posterhub"


def test_database_url_sslmode_becomes_ssl():
    settings = Settings(DATABASE_URL="postgresql://u:p@db:5432/posterhub?sslmode=require")

    assert settings.DATABASE_URL == "postgresql+asyncpg://u:p@db:5432/posterhub?ssl=require"


def test_async_and_sqlite_urls_unchanged():
    for url in ("postgresql+asyncpg://u:p@db/posterhub", "sqlite+aiosqlite:///./posterhub.db"):
        assert Settings(DATABASE_URL=url).DATABASE_URL == url


def test_payout_defaults():
    settings = Settings()

    assert settings.CREATOR_COMMISSION_RATE == 0.30
    assert settings.PAYOUT_SCHEDULER_ENABLED is False
    assert settings.DEFAULT_ORDER_CURRENCY == "EUR"

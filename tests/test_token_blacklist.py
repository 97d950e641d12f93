"""Tests for the database-backed revoked-session list."""

import time
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import select

from boatrental.api.auth import (
    blacklist_token,
    cleanup_expired_blacklist_entries,
    load_blacklist,
)
from boatrental.middleware.session_guard import revoked_sessions
from boatrental.models import TokenBlacklist

pytestmark = pytest.mark.asyncio


async def test_blacklist_token_persists_and_caches(db_session):
    exp = time.time() + 3600

    await blacklist_token(db_session, "jti-one", exp)

    row = (await db_session.execute(select(TokenBlacklist))).scalar_one()
    assert row.jti == "jti-one"
    assert "jti-one" in revoked_sessions


async def test_blacklisting_twice_is_idempotent(db_session):
    exp = time.time() + 3600
    await blacklist_token(db_session, "jti-dup", exp)
    await blacklist_token(db_session, "jti-dup", exp)

    rows = (await db_session.execute(select(TokenBlacklist))).scalars().all()
    assert len(rows) == 1


async def test_load_blacklist_skips_expired_rows(db_session):
    now = datetime.now(UTC)
    db_session.add(TokenBlacklist(jti="live", expires_at=now + timedelta(hours=1)))
    db_session.add(TokenBlacklist(jti="stale", expires_at=now - timedelta(hours=1)))
    await db_session.flush()

    loaded = await load_blacklist(db_session)

    assert loaded == 1
    assert len(revoked_sessions) == 1
    assert "live" in revoked_sessions
    assert "stale" not in revoked_sessions


async def test_cleanup_removes_expired_rows(db_session):
    now = datetime.now(UTC)
    db_session.add(TokenBlacklist(jti="live", expires_at=now + timedelta(hours=1)))
    db_session.add(TokenBlacklist(jti="stale", expires_at=now - timedelta(hours=1)))
    await db_session.flush()

    removed = await cleanup_expired_blacklist_entries(db_session)

    assert removed == 1
    db_session.expunge_all()
    remaining = (await db_session.execute(select(TokenBlacklist.jti))).scalars().all()
    assert remaining == ["live"]

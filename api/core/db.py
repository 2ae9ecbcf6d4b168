"""
Async database access helpers (raw SQL) using asyncpg.

`Database` owns one connection pool. The app factory constructs it, the
lifespan opens it on startup and closes it on shutdown (see `api/main.py`),
and stores receive it explicitly instead of reaching for module state.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from . import settings
from .errors import ConfigurationError, StorageError

logger = logging.getLogger(__name__)

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

NOT_CONFIGURED_MESSAGE = "Database is not configured. Set DATABASE_URL."
INVALID_URL_MESSAGE = "Database is misconfigured. Check DATABASE_URL."


def sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(
        self,
        dsn: str | None,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30,
    ) -> None:
        self.dsn = sanitize_database_url(dsn) if dsn else None
        self.min_size = min_size
        self.max_size = max(max_size, min_size, 1)
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None
        self._open_lock = asyncio.Lock()
        self.last_error: str | None = None
        self.config_error: str | None = None

    @classmethod
    def from_env(cls) -> Database:
        return cls(
            settings.database_url(),
            min_size=settings.db_pool_min_size(),
            max_size=settings.db_pool_max_size(),
            command_timeout=settings.db_command_timeout_s(),
        )

    @property
    def is_configured(self) -> bool:
        return self.dsn is not None

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    async def open(self) -> bool:
        """
        Create the pool. Never raises: a failed open is logged and retried on
        the next query.
        """
        if not self.is_configured:
            logger.warning("database_unconfigured hint=%s", "set DATABASE_URL")
            return False

        if self.config_error is not None:
            return False

        async with self._open_lock:
            if self._pool is not None:
                return True
            try:
                self._pool = await asyncpg.create_pool(
                    dsn=self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout,
                )
            except ValueError as exc:
                # Unparseable DSN (bad port, unknown option) is not retried.
                self.config_error = str(exc) or exc.__class__.__name__
                logger.error("database_url_invalid error=%s", self.config_error)
                return False
            except _DB_ERRORS as exc:
                self.last_error = str(exc) or exc.__class__.__name__
                logger.error("database_open_failed error=%s", self.last_error)
                return False

        self.last_error = None
        return True

    async def close(self) -> None:
        if self._pool is None:
            return None
        pool, self._pool = self._pool, None
        await pool.close()

    async def pool(self) -> asyncpg.Pool:
        if not self.is_configured:
            raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
        if self._pool is None:
            await self.open()
        if self.config_error is not None:
            raise ConfigurationError(INVALID_URL_MESSAGE, error=self.config_error)
        if self._pool is None:
            raise StorageError("Database is unavailable.", error=self.last_error)
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        pool = await self.pool()
        try:
            row = await pool.fetchrow(sql, *args)
        except _DB_ERRORS as exc:
            raise StorageError("Database query failed.", error=str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        pool = await self.pool()
        try:
            rows = await pool.fetch(sql, *args)
        except _DB_ERRORS as exc:
            raise StorageError("Database query failed.", error=str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> None:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). No result returned.
        """
        pool = await self.pool()
        try:
            await pool.execute(sql, *args)
        except _DB_ERRORS as exc:
            raise StorageError("Database statement failed.", error=str(exc)) from exc

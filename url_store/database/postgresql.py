"""PostgreSQL implementation of the URL store."""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

import asyncpg

from ..config import Config
from ..errors import (
    URLExistsError,
    URLNotFoundError,
    StoreConnectionError,
    SchemaInitError,
    StorageError,
    StorageTimeoutError,
)
from .base import URLStoreBase

# Everything the driver or the transport can raise for a failed call.
# asyncio.TimeoutError is only an OSError from Python 3.11 on.
STORAGE_FAILURES = (
    asyncio.TimeoutError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
)


def _safe_dsn(dsn: str) -> str:
    """Return the DSN with any password masked, for logging."""
    try:
        parsed = urlparse(dsn)
    except ValueError:
        return "<unparseable dsn>"
    if not parsed.password:
        return dsn
    netloc = parsed.netloc.replace(f":{parsed.password}@", ":***@", 1)
    return parsed._replace(netloc=netloc).geturl()


def _rows_affected(status: str) -> int:
    """Parse the row count from a command status tag such as ``DELETE 3``."""
    return int(status.rsplit(" ", 1)[-1])


class URLStorePostgreSQL(URLStoreBase):
    """PostgreSQL-backed alias -> url store.

    Every call checks one connection out of the pool for a single statement
    and returns it. The deadline of a call covers both the checkout and the
    statement; the effective deadline is the smaller of the caller's
    ``timeout`` and ``query_timeout_seconds``.
    """

    CREATE_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS url (
        id BIGSERIAL PRIMARY KEY,
        alias TEXT NOT NULL UNIQUE,
        url TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_alias ON url(alias);
    """

    INSERT_SQL = "INSERT INTO url (url, alias) VALUES ($1, $2) RETURNING id"
    SELECT_SQL = "SELECT url FROM url WHERE alias = $1"
    DELETE_SQL = "DELETE FROM url WHERE alias = $1"
    PING_SQL = "SELECT 1"

    def __init__(
        self,
        pool: asyncpg.Pool,
        db_config: str = "",
        query_timeout_seconds: float = 3.0,
        schema_timeout_seconds: float = 5.0,
        owns_pool: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Wrap an existing connection pool.

        Use :meth:`create` to build a store that opens, checks and owns its
        own pool.

        Args:
            pool: asyncpg connection pool
            db_config: Connection string the pool was built from (for logs)
            query_timeout_seconds: Per-call bound for save/get/delete
            schema_timeout_seconds: Bound for schema initialization
            owns_pool: Close the pool in :meth:`close`
            logger: Optional logger instance
        """
        super().__init__(db_config)

        self.logger = logger or logging.getLogger(__name__)
        self.pool = pool
        self.query_timeout_seconds = query_timeout_seconds
        self.schema_timeout_seconds = schema_timeout_seconds
        self.owns_pool = owns_pool
        self._closed = False

    @classmethod
    async def create(
        cls,
        db_config: str,
        pool_min_size: int = 1,
        pool_max_size: int = 10,
        connect_timeout_seconds: float = 10.0,
        schema_timeout_seconds: float = 5.0,
        query_timeout_seconds: float = 3.0,
        logger: Optional[logging.Logger] = None,
    ) -> "URLStorePostgreSQL":
        """Open a pool, ping it and make sure the schema exists.

        Either a ready store is returned or the pool is released and an
        error is raised.

        Raises:
            StoreConnectionError: Pool could not be created or pinged
            SchemaInitError: Schema could not be created
        """
        op = "storage.postgresql.New"
        logger = logger or logging.getLogger(__name__)

        logger.info(f"Creating connection pool for {_safe_dsn(db_config)}")
        try:
            pool = await asyncio.wait_for(
                asyncpg.create_pool(
                    dsn=db_config,
                    min_size=pool_min_size,
                    max_size=pool_max_size,
                    timeout=connect_timeout_seconds,
                ),
                timeout=connect_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out creating connection pool after {connect_timeout_seconds}s")
            raise StoreConnectionError(
                op, f"timed out after {connect_timeout_seconds}s creating pool"
            ) from e
        except STORAGE_FAILURES + (ValueError,) as e:
            logger.error(f"Error creating connection pool: {e}")
            raise StoreConnectionError(op, str(e)) from e

        store = cls(
            pool,
            db_config=db_config,
            query_timeout_seconds=query_timeout_seconds,
            schema_timeout_seconds=schema_timeout_seconds,
            owns_pool=True,
            logger=logger,
        )

        try:
            await store._ping(op, connect_timeout_seconds)
            await store.ensure_schema()
        except BaseException:
            await store.close()
            raise

        logger.info("URL store ready")
        return store

    @classmethod
    async def from_config(
        cls,
        config: Config,
        logger: Optional[logging.Logger] = None,
    ) -> "URLStorePostgreSQL":
        """Build a store from application configuration."""
        return await cls.create(
            db_config=config.database_url,
            pool_min_size=config.pool_min_size,
            pool_max_size=config.pool_max_size,
            connect_timeout_seconds=config.connect_timeout_seconds,
            schema_timeout_seconds=config.schema_timeout_seconds,
            query_timeout_seconds=config.query_timeout_seconds,
            logger=logger,
        )

    @asynccontextmanager
    async def _get_connection(self):
        """Get a database connection from the pool."""
        async with self.pool.acquire() as conn:
            yield conn

    async def _run(
        self,
        deadline: float,
        query: Callable[[asyncpg.Connection], Awaitable[Any]],
    ) -> Any:
        """Run ``query`` on a pooled connection, bounded by ``deadline`` seconds."""

        async def _execute():
            async with self._get_connection() as conn:
                return await query(conn)

        return await asyncio.wait_for(_execute(), timeout=deadline)

    def _deadline(self, timeout: Optional[float]) -> float:
        if timeout is None:
            return self.query_timeout_seconds
        return min(timeout, self.query_timeout_seconds)

    def _storage_error(self, op: str, error: BaseException, deadline: float) -> StorageError:
        """Translate a driver or transport failure into a StorageError."""
        if isinstance(error, (asyncio.TimeoutError, asyncpg.exceptions.QueryCanceledError)):
            self.logger.error(f"{op}: timed out after {deadline}s")
            return StorageTimeoutError(op, f"timed out after {deadline}s")
        self.logger.error(f"{op}: {error}")
        return StorageError(op, str(error) or type(error).__name__)

    async def _ping(self, op: str, deadline: float) -> None:
        try:
            await self._run(deadline, lambda conn: conn.fetchval(self.PING_SQL))
        except asyncio.TimeoutError as e:
            self.logger.error(f"Ping timed out after {deadline}s")
            raise StoreConnectionError(op, f"ping timed out after {deadline}s") from e
        except STORAGE_FAILURES as e:
            self.logger.error(f"Ping failed: {e}")
            raise StoreConnectionError(op, f"ping failed: {e}") from e

    async def ensure_schema(self, timeout: Optional[float] = None) -> None:
        """Create the url table and its alias index if they don't exist.

        Safe to run any number of times.

        Raises:
            SchemaInitError: If the statements fail or time out
        """
        op = "storage.postgresql.EnsureSchema"
        deadline = self.schema_timeout_seconds
        if timeout is not None:
            deadline = min(timeout, deadline)

        try:
            self.logger.info("Creating url table if not exists...")
            await self._run(deadline, lambda conn: conn.execute(self.CREATE_SCHEMA_SQL))
        except asyncio.TimeoutError as e:
            self.logger.error(f"Schema creation timed out after {deadline}s")
            raise SchemaInitError(op, f"timed out after {deadline}s") from e
        except STORAGE_FAILURES as e:
            self.logger.error(f"Error creating schema: {e}")
            raise SchemaInitError(op, str(e)) from e

        self.logger.info("Schema ready")

    async def save_url(self, url: str, alias: str, timeout: Optional[float] = None) -> int:
        """Store ``url`` under ``alias`` and return the new record id.

        Raises:
            URLExistsError: If the alias is already stored
            StorageError: On any other storage failure
        """
        op = "storage.postgresql.SaveURL"
        deadline = self._deadline(timeout)

        try:
            new_id = await self._run(
                deadline, lambda conn: conn.fetchval(self.INSERT_SQL, url, alias)
            )
        except asyncpg.exceptions.UniqueViolationError as e:
            self.logger.debug(f"Alias already exists: {alias}")
            raise URLExistsError(op, details={"alias": alias}) from e
        except STORAGE_FAILURES as e:
            raise self._storage_error(op, e, deadline) from e

        self.logger.debug(f"Saved url: {alias} -> {url} (id={new_id})")
        return int(new_id)

    async def get_url(self, alias: str, timeout: Optional[float] = None) -> str:
        """Return the url stored under ``alias``.

        Raises:
            URLNotFoundError: If the alias is not stored
            StorageError: On any other storage failure
        """
        op = "storage.postgresql.GetURL"
        deadline = self._deadline(timeout)

        try:
            row = await self._run(
                deadline, lambda conn: conn.fetchrow(self.SELECT_SQL, alias)
            )
        except STORAGE_FAILURES as e:
            raise self._storage_error(op, e, deadline) from e

        if row is None:
            self.logger.debug(f"Alias not found: {alias}")
            raise URLNotFoundError(op, details={"alias": alias})

        return row["url"]

    async def delete_url(self, alias: str, timeout: Optional[float] = None) -> None:
        """Delete the mapping stored under ``alias``.

        Raises:
            URLNotFoundError: If no row was deleted
            StorageError: On any other storage failure
        """
        op = "storage.postgresql.DeleteURL"
        deadline = self._deadline(timeout)

        try:
            status = await self._run(
                deadline, lambda conn: conn.execute(self.DELETE_SQL, alias)
            )
        except STORAGE_FAILURES as e:
            raise self._storage_error(op, e, deadline) from e

        try:
            deleted = _rows_affected(status)
        except (AttributeError, ValueError) as e:
            self.logger.error(f"{op}: unexpected command status {status!r}")
            raise StorageError(op, f"unexpected command status {status!r}") from e

        if deleted == 0:
            self.logger.debug(f"Nothing to delete for alias: {alias}")
            raise URLNotFoundError(op, details={"alias": alias})

        self.logger.debug(f"Deleted alias: {alias}")

    async def health_check(self) -> bool:
        """Check if database is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self._run(
                self.query_timeout_seconds, lambda conn: conn.fetchval(self.PING_SQL)
            )
            return True
        except STORAGE_FAILURES as e:
            self.logger.error(f"Health check failed: {e!r}")
            return False

    async def close(self) -> None:
        """Close the pool if this store owns it."""
        if self._closed:
            return
        self._closed = True

        if not self.owns_pool:
            return

        try:
            await self.pool.close()
            self.logger.info("Closed connection pool")
        except STORAGE_FAILURES as e:
            self.logger.error(f"Error closing connection pool: {e}")
            self.pool.terminate()


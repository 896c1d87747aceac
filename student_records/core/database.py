import asyncio
import enum
import logging
from typing import Generator, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from .config import Settings
from .exceptions import ServiceUnavailableException

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Database:
    """
    Owns the engine, the session factory and the connection state.

    State machine::

        disconnected -> connecting -> connected
        connected -> connecting   (transport-level disconnect detected)

    While the state is not ``connected`` every data operation fails fast
    with ``ServiceUnavailableException``. A failed connect attempt is
    retried after ``reconnect_delay`` seconds, without limit.
    """

    def __init__(self, url: str, reconnect_delay: float = 5.0, **engine_options):
        self.engine = create_engine(url, **engine_options)
        self.SessionLocal = sessionmaker(
            autocommit=False,  # Don't auto-commit transactions
            autoflush=False,   # Don't auto-flush before queries
            bind=self.engine,
            expire_on_commit=False  # Don't expire objects after commit
        )
        self.reconnect_delay = reconnect_delay
        self._state = ConnectionState.DISCONNECTED
        self._reconnect_task: Optional[asyncio.Task] = None

        event.listen(self.engine, "connect", self._on_connect)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Build the production database from application settings."""
        return cls(
            settings.DATABASE_URL,
            reconnect_delay=settings.DB_RECONNECT_DELAY,
            poolclass=QueuePool,
            pool_size=settings.DB_POOL_SIZE,  # One shared logical connection by default
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,  # Test connection before using (detect disconnects)
            echo=settings.DB_ECHO_SQL,
            connect_args={
                "connect_timeout": settings.DB_CONNECT_TIMEOUT,
            },
        )

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def is_reconnecting(self) -> bool:
        return self._reconnect_task is not None and not self._reconnect_task.done()

    def ensure_connected(self) -> None:
        if not self.is_connected:
            raise ServiceUnavailableException()

    # =========================================================================
    # CONNECTING
    # =========================================================================

    def try_connect(self) -> bool:
        """
        Run one connect attempt: ping the server and create the
        students table if it is missing.

        Returns:
            bool: True if the database is now connected
        """
        self._state = ConnectionState.CONNECTING
        try:
            with self.engine.begin() as connection:
                connection.execute(text("SELECT 1"))
                self.create_tables(connection)
        except SQLAlchemyError as e:
            logger.error(f"Database connection failed: {e}")
            return False
        except Exception:
            logger.exception("Unexpected error while connecting to database")
            return False

        self._state = ConnectionState.CONNECTED
        logger.info("Database connected")
        return True

    async def connect_forever(self) -> None:
        """Retry ``try_connect`` every ``reconnect_delay`` seconds until it succeeds."""
        attempt = 0
        while not await run_in_threadpool(self.try_connect):
            attempt += 1
            logger.warning(
                f"Database unavailable (attempt {attempt}), "
                f"retrying in {self.reconnect_delay}s"
            )
            await asyncio.sleep(self.reconnect_delay)

    def start(self) -> None:
        """
        Schedule the reconnect loop on the running event loop.
        Does nothing if already connected or a reconnect is in flight.
        """
        if self.is_connected or self.is_reconnecting:
            return
        self._state = ConnectionState.CONNECTING
        self._reconnect_task = asyncio.get_running_loop().create_task(self.connect_forever())

    def mark_disconnected(self) -> None:
        """Called when a statement failed because the connection was lost."""
        if self._state is ConnectionState.CONNECTED:
            logger.warning("Lost connection to database, reconnecting...")
            self._state = ConnectionState.CONNECTING
            self.engine.dispose()
        self.start()

    async def stop(self) -> None:
        if self.is_reconnecting:
            self._reconnect_task.cancel()
            try:
                await self._reconnect_task
            except asyncio.CancelledError:
                pass
        self._reconnect_task = None
        self.engine.dispose()
        self._state = ConnectionState.DISCONNECTED
        logger.info("Database connections closed")

    # =========================================================================
    # SCHEMA AND SESSIONS
    # =========================================================================

    def create_tables(self, connection) -> None:
        """CREATE TABLE IF NOT EXISTS for every model."""
        from student_records.models import student  # noqa: F401  (registers the table)

        Base.metadata.create_all(bind=connection)

    def session(self) -> Generator[Session, None, None]:
        """
        Yield a session and close it afterwards, even if the request failed.
        """
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def _on_connect(self, dbapi_conn, connection_record):
        logger.debug("New database connection established")

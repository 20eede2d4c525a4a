"""
Persistence gateway - the only path from the service layer to the store.

Every write runs as a unit of work inside its own session: the caller's
work function receives the session, and the gateway commits afterwards.
Save faults are rolled back and logged, then reported through the
returned TransactionResult. Failing to open a session at all is fatal
and raised as StoreUnavailableError.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type, TypeVar
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import PersistenceError, StoreUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

UnitOfWork = Callable[[Session], Any]


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a unit of work. Truthy only when the commit went through."""
    committed: bool
    error: Optional[SQLAlchemyError] = None

    def __bool__(self) -> bool:
        return self.committed


class EntityStream:
    """
    Iterator over query results that owns its session.

    The session is closed when the rows run out, when close() is called,
    or when the stream is garbage collected, whichever comes first.
    """

    def __init__(self, session: Session, result):
        self._session = session
        self._rows = iter(result)

    def __iter__(self) -> "EntityStream":
        return self

    def __next__(self) -> Any:
        if self._session is None:
            raise StopIteration
        try:
            return next(self._rows)
        except BaseException:
            # Exhausted or failed, either way the session is done
            self.close()
            raise

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    @property
    def closed(self) -> bool:
        return self._session is None

    def __del__(self):
        self.close()


class PersistenceGateway:
    def __init__(self, engine: Engine):
        self.engine = engine
        # Entities must stay readable once their session is closed
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )

    def _open_session(self) -> Session:
        """
        Open a session and force it to acquire a connection.

        Raises:
            StoreUnavailableError: if no connection could be obtained
        """
        session = self._session_factory()
        try:
            session.connection()
        except SQLAlchemyError as e:
            session.close()
            logger.error("Could not open a session to the database: %s", e)
            raise StoreUnavailableError("Could not open a session to the database") from e
        return session

    def use_session(self, work: UnitOfWork) -> TransactionResult:
        """
        Run work(session) and commit.

        Database errors raised by the work or by the commit roll the
        transaction back and are logged, not raised. Any other exception
        propagates; the session is closed either way, which discards
        uncommitted changes.

        Args:
            work: Callable receiving the open session

        Returns:
            TransactionResult telling whether the changes were committed

        Raises:
            StoreUnavailableError: if the session could not be opened
        """
        session = self._open_session()
        with session:
            try:
                work(session)
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Could not save changes to database: %s", e)
                return TransactionResult(committed=False, error=e)
        return TransactionResult(committed=True)

    async def use_session_async(self, work: UnitOfWork) -> TransactionResult:
        """Same as use_session, run on a worker thread."""
        return await asyncio.to_thread(self.use_session, work)

    def find_one(self, model: Type[T], *criteria) -> Optional[T]:
        """
        Return the first entity of `model` matching all criteria.

        Criteria are SQLAlchemy column expressions, e.g.
        ``Account.email == "a@example.com"``. Without criteria any row
        matches. Rows are taken in primary key order.
        """
        stmt = select(model)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = stmt.order_by(model.id).limit(1)

        session = self._open_session()
        with session:
            try:
                return session.scalars(stmt).first()
            except SQLAlchemyError as e:
                logger.error("Could not read %s from database: %s", model.__name__, e)
                raise PersistenceError(f"Could not read {model.__name__}") from e

    def find_many(self, model: Type[T], *criteria, page: int = 0, count: int = 0) -> EntityStream:
        """
        Lazily iterate entities of `model` in primary key order.

        count=0 returns every matching row. Otherwise at most `count` rows
        are returned after skipping page * count. The session is opened
        right away and closed once the iterator is exhausted or closed.

        Raises:
            ValueError: if page or count is negative
            StoreUnavailableError: if the session could not be opened
            PersistenceError: if the query failed
        """
        if page < 0 or count < 0:
            raise ValueError("page and count must not be negative")

        stmt = select(model)
        if criteria:
            stmt = stmt.where(*criteria)
        stmt = stmt.order_by(model.id)
        if count:
            stmt = stmt.offset(page * count).limit(count)

        session = self._open_session()
        try:
            result = session.scalars(stmt)
        except SQLAlchemyError as e:
            session.close()
            logger.error("Could not read %s from database: %s", model.__name__, e)
            raise PersistenceError(f"Could not read {model.__name__}") from e
        return EntityStream(session, result)

    def add(self, entity: Any) -> TransactionResult:
        """Persist a new entity in its own unit of work."""
        return self.use_session(lambda session: session.add(entity))

    async def add_async(self, entity: Any) -> TransactionResult:
        return await self.use_session_async(lambda session: session.add(entity))

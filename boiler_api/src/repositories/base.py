from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import ColumnElement, delete, inspect as sa_inspect, select
from sqlalchemy.exc import DBAPIError, InterfaceError, MultipleResultsFound, NoResultFound, OperationalError
from sqlalchemy.orm import Session, selectinload

from src.core.context import RequestContext
from src.core.errors import ConnectionFailure, InvalidOperation, NotFound, QueryAmbiguity
from src.db.audit import CONTEXT_KEY
from src.db.session import ConnectionFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _default_on_error(query: Callable[[], R], default: Optional[R] = None) -> Optional[R]:
    """
    Run query and return default if it raises anything at all.

    This deliberately swallows every exception, not just no-match/ambiguous
    results; narrowing it means changing only this function.
    """
    try:
        return query()
    except Exception as exc:
        logger.debug("Query failed, returning default: %s", exc)
        return default


class Repository(Generic[T]):
    """
    Generic CRUD and query access for one mapped entity with an integer id.

    Every operation opens its own session (one connection) from the factory and
    closes it before returning, whether or not the operation succeeded. The
    repository itself holds no rows.
    """

    def __init__(
        self,
        model: Type[T],
        connection_factory: ConnectionFactory,
        context: Optional[RequestContext] = None,
    ) -> None:
        if connection_factory is None:
            raise ValueError(f"connection_factory is required for {type(self).__name__}")
        self.model = model
        self.connection_factory = connection_factory
        self.context = context

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    @contextmanager
    def _open(self) -> Iterator[Session]:
        """
        Open a session with its connection acquired up front. Failing to acquire
        it, or losing it mid-operation, raises ConnectionFailure.
        """
        session = self.connection_factory()
        try:
            if self.context is not None:
                session.info[CONTEXT_KEY] = self.context
            try:
                session.connection()
            except (OperationalError, InterfaceError) as exc:
                raise ConnectionFailure(
                    f"Could not open a connection for {self.entity_name}",
                    {"error": str(exc)},
                ) from exc
            try:
                yield session
            except DBAPIError as exc:
                # a dropped connection mid-operation; other driver errors propagate as-is
                if not exc.connection_invalidated:
                    raise
                raise ConnectionFailure(
                    f"Connection lost during {self.entity_name} operation",
                    {"error": str(exc)},
                ) from exc
        finally:
            session.close()

    def _select(self, *criteria: ColumnElement[bool]):
        stmt = select(self.model)
        if criteria:
            stmt = stmt.where(*criteria)
        return stmt

    def _single(self, session: Session, criteria: tuple) -> T:
        try:
            return session.scalars(self._select(*criteria)).one()
        except NoResultFound as exc:
            raise QueryAmbiguity(self.entity_name, "none") from exc
        except MultipleResultsFound as exc:
            raise QueryAmbiguity(self.entity_name, "more than one") from exc

    # PUBLIC_INTERFACE
    def all(self) -> List[T]:
        """Return every row of the entity's table."""
        with self._open() as session:
            return list(session.scalars(self._select()))

    # PUBLIC_INTERFACE
    def get_by_id(self, id: int) -> Optional[T]:
        """Return the row with the given id and its relationships loaded, or None."""
        options = [
            selectinload(getattr(self.model, rel.key))
            for rel in sa_inspect(self.model).relationships
        ]
        with self._open() as session:
            return session.get(self.model, id, options=options)

    # PUBLIC_INTERFACE
    def delete(self, id: int) -> None:
        """Delete the row with the given id; deleting a missing row is a no-op."""
        with self._open() as session:
            session.execute(delete(self.model).where(self.model.id == id))
            session.commit()

    # PUBLIC_INTERFACE
    def insert(self, model: T) -> int:
        """Persist a new row and return its store-generated id."""
        with self._open() as session:
            session.add(model)
            session.commit()
            logger.debug("Inserted %s %s", self.entity_name, model.id)
            return int(model.id)

    # PUBLIC_INTERFACE
    def update(self, model: T) -> int:
        """
        Apply the model's values to the existing row with the same id.

        Raises:
            InvalidOperation: the model has no id.
            NotFound: no row with that id exists.
        """
        model_id = getattr(model, "id", None)
        if model_id is None or model_id < 1:
            raise InvalidOperation(f"Cannot update {self.entity_name} with no id")

        with self._open() as session:
            existing = session.get(self.model, model_id)
            if existing is None:
                raise NotFound(self.entity_name, model_id)
            # column values only; related rows are written through their own repository
            values = sa_inspect(model).dict
            for attr in sa_inspect(self.model).column_attrs:
                if attr.key in values:
                    setattr(existing, attr.key, values[attr.key])
            session.commit()
            return model_id

    # PUBLIC_INTERFACE
    def where(self, *criteria: ColumnElement[bool]) -> List[T]:
        """Return rows matching all of the given SQLAlchemy boolean expressions."""
        with self._open() as session:
            return list(session.scalars(self._select(*criteria)))

    # PUBLIC_INTERFACE
    def where_by(self, **fields: Any) -> List[T]:
        """Return rows whose fields equal all of the given values."""
        with self._open() as session:
            return list(session.scalars(select(self.model).filter_by(**fields)))

    # PUBLIC_INTERFACE
    def single(self, *criteria: ColumnElement[bool]) -> T:
        """Return the only row matching criteria; QueryAmbiguity on zero or several."""
        with self._open() as session:
            return self._single(session, criteria)

    # PUBLIC_INTERFACE
    def single_or_default(self, *criteria: ColumnElement[bool]) -> Optional[T]:
        """Like single(), but any query failure returns None instead of raising."""
        with self._open() as session:
            return _default_on_error(lambda: self._single(session, criteria))

"""
Row-secure store: the query interface every service goes through.

A RowSecureStore binds an AsyncSession to one caller principal and evaluates
each operation against the policy set before it reaches the database:

  select / first / count   rows filtered by the SELECT policies
  get                      NotFoundError when the row is missing or invisible
  insert                   INSERT check on the new row
  update                   row must be visible (else NotFoundError) and
                           admitted by UPDATE `using` and `check`
                           (else PolicyViolationError)
  delete                   row must be visible and admitted by DELETE `using`
  lock                     SELECT ... FOR UPDATE on a visible row, plus an
                           in-process lock where FOR UPDATE is a no-op

Policy checks run before anything is flushed, so a rejected write has no
visible side effect. Integrity failures surface as ConstraintViolationError
and connectivity failures as StoreUnavailableError.
"""

from types import SimpleNamespace
from typing import Any, Iterable, Optional, TypeVar
import uuid

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from event_hub.core.errors import ConstraintViolationError, NotFoundError, StoreUnavailableError
from event_hub.core.logging import get_logger
from event_hub.core.metrics import record_store_error, record_store_operation
from event_hub.store import policies, row_locks
from event_hub.store.policies import Operation
from event_hub.store.principal import Principal

logger = get_logger(__name__)

ModelT = TypeVar("ModelT")

# Singular resource names for not-found messages
RESOURCE_NAMES = {
    "events": "Event",
    "event_registrations": "Registration",
    "profiles": "Profile",
    "event_notifications": "Notification",
}


class RowSecureStore:

    def __init__(self, session: AsyncSession, principal: Principal):
        self.session = session
        self.principal = principal

    # Reads

    async def select(
        self,
        model: type[ModelT],
        *criteria,
        order_by: Iterable = (),
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> list[ModelT]:
        stmt = select(model).where(self._visible(model, Operation.SELECT), *criteria)
        for clause in order_by:
            stmt = stmt.order_by(clause)
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(model, Operation.SELECT, stmt)
        return list(result.scalars().all())

    async def first(self, model: type[ModelT], *criteria) -> Optional[ModelT]:
        rows = await self.select(model, *criteria, limit=1)
        return rows[0] if rows else None

    async def get(self, model: type[ModelT], row_id: uuid.UUID) -> ModelT:
        row = await self.first(model, model.id == row_id)
        if row is None:
            raise NotFoundError(self._resource(model), row_id)
        return row

    async def count(self, model, *criteria) -> int:
        stmt = (
            select(func.count())
            .select_from(model)
            .where(self._visible(model, Operation.SELECT), *criteria)
        )
        result = await self._execute(model, Operation.SELECT, stmt)
        return result.scalar_one()

    async def count_all(self, model, *criteria) -> int:
        """Aggregate count over every matching row, ignoring row visibility.

        Only the number leaves the store, never row content. Capacity checks
        and registration counts need the true total, which per-row policies
        would otherwise hide from non-creators.
        """
        stmt = select(func.count()).select_from(model).where(*criteria)
        result = await self._execute(model, Operation.SELECT, stmt)
        return result.scalar_one()

    async def tally(self, model, group_column, *criteria) -> dict[Any, int]:
        """Grouped form of count_all: {group value: row count}."""
        stmt = (
            select(group_column, func.count())
            .select_from(model)
            .where(*criteria)
            .group_by(group_column)
        )
        result = await self._execute(model, Operation.SELECT, stmt)
        return {key: total for key, total in result.all()}

    async def lock(self, model: type[ModelT], row_id: uuid.UUID) -> ModelT:
        """Fetch a visible row with a row lock held until the transaction ends."""
        if row_locks.needs_row_lock(self.session):
            await row_locks.acquire(self.session, (model.__tablename__, row_id))
        stmt = (
            select(model)
            .where(self._visible(model, Operation.SELECT), model.id == row_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._execute(model, "lock", stmt)
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError(self._resource(model), row_id)
        return row

    # Writes

    async def insert(self, row: ModelT) -> ModelT:
        table = row.__tablename__
        policies.authorize_write(table, Operation.INSERT, self.principal, row)
        self.session.add(row)
        await self._flush(table, Operation.INSERT)
        await self.session.refresh(row)
        return row

    async def update(self, model: type[ModelT], row_id: uuid.UUID, values: dict[str, Any]) -> ModelT:
        row = await self._writable(model, row_id, Operation.UPDATE)
        unknown = [key for key in values if key not in model.__mapper__.attrs]
        if unknown:
            raise ValueError(f"{model.__name__} has no attribute(s) {unknown}")

        # Check the row as it would look after the update, before touching it
        current = {attr.key: getattr(row, attr.key) for attr in model.__mapper__.column_attrs}
        candidate = SimpleNamespace(**{**current, **values})
        policies.authorize_write(model.__tablename__, Operation.UPDATE, self.principal, candidate)

        for key, value in values.items():
            setattr(row, key, value)
        await self._flush(model.__tablename__, Operation.UPDATE)
        await self.session.refresh(row)
        return row

    async def delete(self, model: type[ModelT], row_id: uuid.UUID) -> None:
        row = await self._writable(model, row_id, Operation.DELETE)
        await self.session.delete(row)
        await self._flush(model.__tablename__, Operation.DELETE)

    # Internals

    def _visible(self, model, operation: Operation):
        return policies.row_filter(model.__tablename__, operation, self.principal)

    async def _writable(self, model: type[ModelT], row_id: uuid.UUID, operation: Operation) -> ModelT:
        row = await self.get(model, row_id)
        stmt = select(model.id).where(
            and_(model.id == row_id, self._visible(model, operation))
        )
        result = await self._execute(model, operation, stmt)
        if result.scalar_one_or_none() is None:
            policies.deny(model.__tablename__, operation, self.principal)
        return row

    async def _execute(self, model, operation, stmt):
        op = operation.value if isinstance(operation, Operation) else operation
        record_store_operation(model.__tablename__, op)
        try:
            return await self.session.execute(stmt)
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable(model.__tablename__, op, e) from e

    async def _flush(self, table: str, operation: Operation) -> None:
        record_store_operation(table, operation.value)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            record_store_error("constraint_violation")
            logger.warning(
                "constraint_violation",
                table=table,
                operation=operation.value,
                error=str(e.orig),
            )
            raise ConstraintViolationError(_describe_integrity_error(table, e)) from e
        except (OperationalError, InterfaceError) as e:
            raise self._unavailable(table, operation.value, e) from e

    def _unavailable(self, table: str, operation: str, error: Exception) -> StoreUnavailableError:
        record_store_error("store_unavailable")
        logger.error("store_unavailable", table=table, operation=operation, error=str(error))
        return StoreUnavailableError("The data store is currently unavailable")

    @staticmethod
    def _resource(model) -> str:
        return RESOURCE_NAMES.get(model.__tablename__, model.__name__)


def _describe_integrity_error(table: str, error: IntegrityError) -> str:
    detail = str(error.orig).lower()
    if "unique" in detail or "duplicate" in detail:
        return f"Duplicate row in {table}"
    if "foreign key" in detail:
        return f"Referenced row for {table} does not exist"
    if "check" in detail:
        return f"Invalid value for {table}"
    return f"Constraint violation on {table}"

import logging
from datetime import datetime
from typing import Optional, Type

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def soft_delete(
    session: AsyncSession,
    model: Type,
    record_id: int,
    stamp_column: Optional[str] = None,
):
    """Flip ``active`` to false on one active row and return it, or None if no row matched.

    Rows already inactive do not match, so a repeated delete reports not-found.
    """
    values = {"active": False}
    if stamp_column:
        values[stamp_column] = datetime.utcnow()

    stmt = (
        update(model)
        .where(model.id == record_id, model.active.is_(True))
        .values(**values)
        .returning(model)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await session.execute(stmt)
        row = result.scalar_one_or_none()
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    if row is None:
        logger.info(f"Soft delete matched no active {model.__tablename__} row for id {record_id}")
    else:
        logger.info(f"Soft-deleted {model.__tablename__} row {record_id}")
    return row

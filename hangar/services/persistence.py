"""
Find-or-create protocol shared by the entity resolvers.

Concurrent flight creations may race to create the same airline, airport or
aircraft. No locks are taken; the database's unique indexes decide:

1. Attempt the insert in its own transaction
2. On a uniqueness violation, roll back and re-query by the conflicting keys
3. Return whichever row won, or raise EntityCreationRaceError if none is found
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from hangar.errors import EntityCreationRaceError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def load(session: Session, model: Type[T], entity_id: int) -> Optional[T]:
    """Load a row by primary key with its eager relationships populated."""
    stmt = select(model).where(model.id == entity_id).execution_options(populate_existing=True)
    return session.scalars(stmt).first()


def find_by_keys(session: Session, model: Type[T], keys: Dict[str, Any]) -> Optional[T]:
    """Return the first row matching ANY of the non-null key values."""
    conditions = [getattr(model, name) == value for name, value in keys.items() if value is not None]
    if not conditions:
        return None
    return session.scalars(select(model).where(or_(*conditions)).limit(1)).first()


def create_or_fetch(
    session_factory: sessionmaker,
    model: Type[T],
    values: Dict[str, Any],
    conflict_keys: Sequence[str],
) -> Tuple[T, bool]:
    """
    Insert a row, resolving unique-constraint races by re-fetching.

    Args:
        session_factory: Session factory to open short transactions with
        model: Mapped class to create
        values: Column values for the new row
        conflict_keys: Unique columns to re-query by when the insert conflicts

    Returns:
        (instance, created) where created is False if a concurrent writer won

    Raises:
        EntityCreationRaceError: insert conflicted but no row matches the keys
    """
    name = model.__name__

    with session_factory() as session:
        instance = model(**values)
        session.add(instance)
        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            logger.info(f'{name} insert conflicted on {list(conflict_keys)}, re-fetching: {e.orig}')
        else:
            return load(session, model, instance.id), True

    keys = {key: values.get(key) for key in conflict_keys}
    with session_factory() as session:
        existing = find_by_keys(session, model, keys)

    if existing is None:
        logger.error(f'{name} insert conflicted but no row matches {keys}')
        raise EntityCreationRaceError(name, keys)

    logger.info(f'Found {name} created by concurrent request: {keys}')
    return existing, False

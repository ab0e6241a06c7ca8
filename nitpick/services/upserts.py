"""
Single-statement insert-or-ignore and insert-or-update helpers.

PostgreSQL and SQLite use ``ON CONFLICT``, MySQL/MariaDB use
``ON DUPLICATE KEY UPDATE`` / ``INSERT IGNORE``. Any other backend falls back
to inserting inside a savepoint and recovering the unique violation.
"""

import logging
from typing import Any, Dict, Sequence

from sqlalchemy import insert, update, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _dialect_insert(db: Session):
    name = db.get_bind().dialect.name
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert as pg_insert
        return name, pg_insert
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert as sqlite_insert
        return name, sqlite_insert
    if name in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert as mysql_insert
        return name, mysql_insert
    return name, None


def _key_clause(model, values: Dict[str, Any], key_columns: Sequence[str]):
    return and_(*(getattr(model, column) == values[column] for column in key_columns))


def insert_ignore(db: Session, model, values: Dict[str, Any], key_columns: Sequence[str]) -> None:
    """Insert ``values`` unless a row with the same key columns exists."""
    name, dialect_insert = _dialect_insert(db)
    if dialect_insert is None:
        try:
            with db.begin_nested():
                db.execute(insert(model).values(**values))
        except IntegrityError:
            logger.debug(f"{model.__tablename__}: row already present for {values}")
        return

    stmt = dialect_insert(model).values(**values)
    if name in ("mysql", "mariadb"):
        stmt = stmt.prefix_with("IGNORE")
    else:
        stmt = stmt.on_conflict_do_nothing(index_elements=list(key_columns))
    db.execute(stmt)


def upsert(db: Session, model, values: Dict[str, Any], key_columns: Sequence[str],
           changes: Dict[str, Any]) -> None:
    """
    Insert ``values``, or apply ``changes`` to the row sharing the key columns.

    Runs as one statement where the backend supports it, so concurrent
    callers never produce duplicate rows.
    """
    name, dialect_insert = _dialect_insert(db)
    if dialect_insert is None:
        try:
            with db.begin_nested():
                db.execute(insert(model).values(**values))
        except IntegrityError:
            db.execute(
                update(model)
                .where(_key_clause(model, values, key_columns))
                .values(**changes)
            )
        return

    stmt = dialect_insert(model).values(**values)
    if name in ("mysql", "mariadb"):
        stmt = stmt.on_duplicate_key_update(**changes)
    else:
        stmt = stmt.on_conflict_do_update(index_elements=list(key_columns), set_=changes)
    db.execute(stmt)

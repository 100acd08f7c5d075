from typing import Any

from psycopg import sql

from doccompare.database.repositories.base import check_columns
from doccompare.database.repositories.postgres.rows import to_db_value


def build_update(
    table: str, entity_id: int, changes: dict[str, Any], allowed: frozenset[str]
) -> tuple[sql.Composed, list[Any]]:
    """Compose ``UPDATE table SET ..., updated_at = NOW() WHERE id = %s``."""
    check_columns(changes, allowed)
    assignments = [
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in changes
    ]
    assignments.append(sql.SQL("updated_at = NOW()"))
    query = sql.SQL("UPDATE {} SET {} WHERE id = %s").format(
        sql.Identifier(table), sql.SQL(", ").join(assignments)
    )
    params = [to_db_value(column, value) for column, value in changes.items()]
    params.append(entity_id)
    return query, params

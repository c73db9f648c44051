"""
MuniFlow Relational Store
Domain: Persistence

Thin record-collection interface over Postgres. The provisioning sequence
only needs insert/select/delete against named tables (organizations,
profiles, audit_logs); anything richer belongs in the database itself.
"""

from typing import Optional, Dict, Any, List

import psycopg2
import psycopg2.extras
from psycopg2 import sql


class StoreError(Exception):
    """Raised when a store operation fails."""


def _error_message(error: Exception) -> str:
    diag = getattr(error, 'diag', None)
    primary = getattr(diag, 'message_primary', None) if diag else None
    return primary or str(error).strip() or error.__class__.__name__


class PostgresStore:
    """Record collections backed by Postgres tables.

    Each call commits (or rolls back) its own statement. There is no
    transaction spanning several calls.
    """

    def __init__(self, get_db):
        """
        Args:
            get_db: Callable returning an open psycopg2 connection.
        """
        self.get_db = get_db

    def _cursor(self, db):
        return db.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

    def insert(self, collection: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert records into a collection.

        Args:
            collection: Table name
            records: Column -> value mappings

        Returns:
            The inserted rows as dicts (RETURNING *)
        """
        db = self.get_db()
        cur = self._cursor(db)

        try:
            rows = []
            for record in records:
                columns = list(record.keys())
                query = sql.SQL('INSERT INTO {} ({}) VALUES ({}) RETURNING *').format(
                    sql.Identifier(collection),
                    sql.SQL(', ').join(sql.Identifier(c) for c in columns),
                    sql.SQL(', ').join(sql.Placeholder() for _ in columns),
                )
                cur.execute(query, [record[c] for c in columns])
                row = cur.fetchone()
                if row is not None:
                    rows.append(dict(row))
            db.commit()
            return rows
        except psycopg2.Error as e:
            db.rollback()
            raise StoreError(_error_message(e)) from e
        finally:
            cur.close()

    def select(self, collection: str, where: Optional[Dict[str, Any]] = None,
               order_by: Optional[str] = None, descending: bool = False,
               limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Select rows from a collection.

        Args:
            collection: Table name
            where: Column -> value equality filters, ANDed
            order_by: Optional column to sort by
            descending: Sort direction for order_by
            limit: Optional row cap

        Returns:
            List of row dicts
        """
        where = where or {}
        query = sql.SQL('SELECT * FROM {}').format(sql.Identifier(collection))
        params = []

        if where:
            conditions = []
            for column, value in where.items():
                conditions.append(sql.SQL('{} = %s').format(sql.Identifier(column)))
                params.append(value)
            query += sql.SQL(' WHERE ') + sql.SQL(' AND ').join(conditions)

        if order_by:
            direction = sql.SQL(' DESC' if descending else ' ASC')
            query += sql.SQL(' ORDER BY {}').format(sql.Identifier(order_by)) + direction

        if limit is not None:
            query += sql.SQL(' LIMIT %s')
            params.append(limit)

        db = self.get_db()
        cur = self._cursor(db)

        try:
            cur.execute(query, params)
            return [dict(row) for row in cur.fetchall()]
        except psycopg2.Error as e:
            db.rollback()
            raise StoreError(_error_message(e)) from e
        finally:
            cur.close()

    def delete(self, collection: str, field: str, value: Any) -> int:
        """
        Delete rows where field = value.

        Returns:
            Number of rows deleted
        """
        db = self.get_db()
        cur = self._cursor(db)

        try:
            cur.execute(
                sql.SQL('DELETE FROM {} WHERE {} = %s').format(
                    sql.Identifier(collection), sql.Identifier(field)
                ),
                (value,)
            )
            deleted = cur.rowcount
            db.commit()
            return deleted
        except psycopg2.Error as e:
            db.rollback()
            raise StoreError(_error_message(e)) from e
        finally:
            cur.close()

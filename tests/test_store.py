# tests/test_store.py
"""
Tests for the Postgres-backed store, with the psycopg2 connection mocked.
"""

from unittest.mock import MagicMock

import psycopg2
import pytest

from store import PostgresStore, StoreError


@pytest.fixture
def db():
    conn = MagicMock()
    conn.cursor.return_value = MagicMock()
    return conn


@pytest.fixture
def cursor(db):
    return db.cursor.return_value


@pytest.fixture
def pg(db):
    return PostgresStore(lambda: db)


def test_insert_returns_rows_and_commits(pg, db, cursor):
    cursor.fetchone.side_effect = [
        {'id': 'org-1', 'name': 'Springfield', 'slug': 'springfield'},
    ]

    rows = pg.insert('organizations', [{'name': 'Springfield', 'slug': 'springfield'}])

    assert rows == [{'id': 'org-1', 'name': 'Springfield', 'slug': 'springfield'}]
    _, params = cursor.execute.call_args[0]
    assert params == ['Springfield', 'springfield']
    db.commit.assert_called_once()
    cursor.close.assert_called_once()


def test_insert_error_rolls_back(pg, db, cursor):
    cursor.execute.side_effect = psycopg2.OperationalError('server closed the connection')

    with pytest.raises(StoreError, match='server closed the connection'):
        pg.insert('profiles', [{'id': 'u1'}])

    db.rollback.assert_called_once()
    db.commit.assert_not_called()
    cursor.close.assert_called_once()


def test_select_passes_filters_and_limit(pg, cursor):
    cursor.fetchall.return_value = [{'id': '1', 'user_id': 'u'}]

    rows = pg.select('audit_logs', where={'user_id': 'u', 'action': 'signup'},
                     order_by='created_at', descending=True, limit=5)

    assert rows == [{'id': '1', 'user_id': 'u'}]
    _, params = cursor.execute.call_args[0]
    assert params == ['u', 'signup', 5]


def test_delete_returns_rowcount(pg, db, cursor):
    cursor.rowcount = 1

    assert pg.delete('organizations', 'id', 'org-1') == 1
    _, params = cursor.execute.call_args[0]
    assert params == ('org-1',)
    db.commit.assert_called_once()


def test_delete_error_rolls_back(pg, db, cursor):
    cursor.execute.side_effect = psycopg2.OperationalError('timeout')

    with pytest.raises(StoreError):
        pg.delete('organizations', 'id', 'org-1')

    db.rollback.assert_called_once()

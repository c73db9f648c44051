# tests/test_run_schema.py
"""
Tests for the schema bootstrap script.
"""

from unittest.mock import MagicMock

import pytest

import run_schema


def test_schema_covers_signup_tables():
    sql = '\n'.join(statement for _, statement in run_schema.STATEMENTS)
    for table in ('organizations', 'profiles', 'audit_logs'):
        assert f'CREATE TABLE IF NOT EXISTS {table}' in sql
    # "table" is a reserved word and must stay quoted
    assert '"table" VARCHAR' in sql


def test_main_runs_every_statement(monkeypatch):
    conn = MagicMock()
    cur = conn.cursor.return_value
    cur.fetchall.return_value = [('audit_logs',), ('organizations',), ('profiles',)]
    monkeypatch.setattr(run_schema, 'DATABASE_URL', 'postgresql://localhost/muniflow')
    monkeypatch.setattr(run_schema.psycopg2, 'connect', MagicMock(return_value=conn))

    assert run_schema.main() == 0
    # every statement plus the verification query
    assert cur.execute.call_count == len(run_schema.STATEMENTS) + 1
    conn.close.assert_called_once()


def test_main_counts_errors(monkeypatch):
    conn = MagicMock()
    cur = conn.cursor.return_value
    cur.execute.side_effect = [Exception('permission denied')] + [None] * len(run_schema.STATEMENTS)
    cur.fetchall.return_value = []
    monkeypatch.setattr(run_schema, 'DATABASE_URL', 'postgresql://localhost/muniflow')
    monkeypatch.setattr(run_schema.psycopg2, 'connect', MagicMock(return_value=conn))

    assert run_schema.main() == 1


def test_main_requires_database_url(monkeypatch):
    monkeypatch.setattr(run_schema, 'DATABASE_URL', None)

    with pytest.raises(SystemExit):
        run_schema.main()

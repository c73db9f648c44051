# tests/conftest.py
"""
Pytest fixtures for MuniFlow signup tests.

The identity provider and the store are replaced by in-memory fakes that
record every call, in order, into one shared list so tests can assert on
the exact provisioning and rollback sequence.
"""

from collections import defaultdict
from uuid import uuid4

import pytest

from app import create_app
from auth.identity import IdentityProviderError
from store import StoreError


class FakeIdentity:
    def __init__(self, calls):
        self.calls = calls
        self.users = {}
        self.sign_up_error = None
        self.delete_error = None
        self.return_user = True

    def sign_up(self, email, password, metadata=None):
        self.calls.append(('sign_up', email))
        if self.sign_up_error:
            raise self.sign_up_error
        if not self.return_user:
            return None
        user = {'id': str(uuid4()), 'email': email, 'user_metadata': metadata or {}}
        self.users[user['id']] = user
        return user

    def delete_user(self, user_id):
        self.calls.append(('delete_user', user_id))
        if self.delete_error:
            raise self.delete_error
        self.users.pop(user_id, None)


class FakeStore:
    def __init__(self, calls):
        self.calls = calls
        self.tables = defaultdict(list)
        self.insert_errors = {}
        self.delete_errors = {}
        self.empty_inserts = set()

    def insert(self, collection, records):
        self.calls.append(('insert', collection))
        if collection in self.insert_errors:
            raise self.insert_errors[collection]
        if collection in self.empty_inserts:
            return []
        rows = []
        for record in records:
            row = dict(record)
            row.setdefault('id', str(uuid4()))
            self.tables[collection].append(row)
            rows.append(dict(row))
        return rows

    def select(self, collection, where=None, order_by=None, descending=False, limit=None):
        self.calls.append(('select', collection))
        where = where or {}
        rows = [dict(r) for r in self.tables[collection]
                if all(r.get(k) == v for k, v in where.items())]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    def delete(self, collection, field, value):
        self.calls.append(('delete', collection, value))
        if collection in self.delete_errors:
            raise self.delete_errors[collection]
        before = len(self.tables[collection])
        self.tables[collection] = [r for r in self.tables[collection] if r.get(field) != value]
        return before - len(self.tables[collection])


@pytest.fixture
def calls():
    return []


@pytest.fixture
def identity(calls):
    return FakeIdentity(calls)


@pytest.fixture
def store(calls):
    return FakeStore(calls)


@pytest.fixture
def app(identity, store):
    flask_app = create_app(identity=identity, store=store)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup_data():
    return {
        'email': 'clerk@springfield.gov',
        'password': 'Str0ngPassw0rd!',
        'fullName': 'J Clerk',
        'organization': 'Springfield',
        'department': '',
    }


@pytest.fixture
def provider_error():
    return IdentityProviderError('User already registered', status=422)


@pytest.fixture
def store_error():
    return StoreError('duplicate key value violates unique constraint')

#!/usr/bin/env python3
"""
MuniFlow Signup API
Tenant signup for municipal workflows: identity + organization + admin profile
"""

import os
import sys
from urllib.parse import urlparse

import psycopg2
from flask import Flask, jsonify, g
from flask_cors import CORS

from auth import IDENTITY_URL, IDENTITY_ANON_KEY, IDENTITY_SERVICE_KEY, IDENTITY_TIMEOUT
from auth.identity import IdentityClient
from auth.signup import init_signup
from onboarding.routes import init_pages
from store import PostgresStore

# Database URL from environment
DATABASE_URL = os.environ.get('DATABASE_URL')

# Startup logging for debugging
print(f"[STARTUP] DATABASE_URL set: {bool(DATABASE_URL)}", file=sys.stderr)
if DATABASE_URL:
    # Log host only (hide credentials)
    parsed = urlparse(DATABASE_URL)
    print(f"[STARTUP] Database host: {parsed.hostname}:{parsed.port}", file=sys.stderr)
print(f"[STARTUP] IDENTITY_URL set: {bool(IDENTITY_URL)}", file=sys.stderr)
if not IDENTITY_SERVICE_KEY:
    print("[STARTUP] WARNING: IDENTITY_SERVICE_KEY not set, signup rollback cannot delete identities", file=sys.stderr)


def get_db():
    """Get database connection for current request context."""
    if 'db' not in g:
        if not DATABASE_URL:
            raise Exception("DATABASE_URL environment variable not set")
        # Add connection timeout to prevent hanging
        g.db = psycopg2.connect(DATABASE_URL, connect_timeout=10)
        g.db.autocommit = False
    return g.db


def close_db(exception):
    """Close database connection at end of request."""
    db = g.pop('db', None)
    if db is not None:
        db.close()


def create_app(identity=None, store=None):
    """Build the Flask app.

    Collaborators are injected so tests (and alternative deployments) can
    swap the identity provider or the store without touching the routes.
    """
    app = Flask(__name__)
    CORS(app)

    if identity is None:
        identity = IdentityClient(
            IDENTITY_URL,
            IDENTITY_ANON_KEY,
            service_key=IDENTITY_SERVICE_KEY,
            timeout=IDENTITY_TIMEOUT,
        )
    if store is None:
        store = PostgresStore(get_db)

    app.teardown_appcontext(close_db)

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    app.register_blueprint(init_signup(identity, store))
    app.register_blueprint(init_pages(identity, store))

    return app


app = create_app()


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    app.run(host='0.0.0.0', port=port, debug=False)

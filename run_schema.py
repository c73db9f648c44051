#!/usr/bin/env python3
"""Create the MuniFlow signup tables (organizations, profiles, audit_logs)"""

import os
import sys

import psycopg2

DATABASE_URL = os.environ.get('DATABASE_URL')

# Define each SQL statement explicitly
STATEMENTS = [
    ('Enable pgcrypto extension',
     'CREATE EXTENSION IF NOT EXISTS "pgcrypto"'),

    ('Create organizations table', '''
CREATE TABLE IF NOT EXISTS organizations (
  id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
  name VARCHAR(255) NOT NULL,
  slug VARCHAR(255) NOT NULL,
  created_at TIMESTAMPTZ DEFAULT NOW()
)'''),

    ('Create profiles table', '''
CREATE TABLE IF NOT EXISTS profiles (
  id UUID PRIMARY KEY,
  email VARCHAR(255) NOT NULL,
  full_name VARCHAR(255) NOT NULL,
  department VARCHAR(255),
  organization_id UUID NOT NULL REFERENCES organizations(id),
  role VARCHAR(50) NOT NULL DEFAULT 'member',
  created_at TIMESTAMPTZ DEFAULT NOW()
)'''),

    ('Create audit_logs table', '''
CREATE TABLE IF NOT EXISTS audit_logs (
  id UUID PRIMARY KEY,
  user_id UUID,
  action VARCHAR(100) NOT NULL,
  "table" VARCHAR(100),
  record_id VARCHAR(255),
  description TEXT,
  ip_address VARCHAR(64),
  created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)'''),

    # Slugs are not unique: two signups may name the same organization
    ('Index organizations by slug',
     'CREATE INDEX IF NOT EXISTS idx_organizations_slug ON organizations(slug)'),
    ('Index profiles by organization',
     'CREATE INDEX IF NOT EXISTS idx_profiles_organization ON profiles(organization_id)'),
    ('Index audit_logs by user',
     'CREATE INDEX IF NOT EXISTS idx_audit_logs_user ON audit_logs(user_id, created_at DESC)'),
]


def main():
    if not DATABASE_URL:
        print("ERROR: DATABASE_URL not set")
        sys.exit(1)

    print("Connecting to Postgres...")
    conn = psycopg2.connect(DATABASE_URL)
    conn.autocommit = True
    cur = conn.cursor()

    print("Running schema...\n")
    success_count = 0
    error_count = 0

    for desc, sql in STATEMENTS:
        print(f"  {desc}...", end=" ")
        try:
            cur.execute(sql)
            print("OK")
            success_count += 1
        except Exception as e:
            print(f"ERROR: {e}")
            error_count += 1

    print(f"\nSchema execution complete! {success_count} succeeded, {error_count} errors")

    # Verify tables
    cur.execute("SELECT table_name FROM information_schema.tables WHERE table_schema = 'public' ORDER BY table_name;")
    tables = [t[0] for t in cur.fetchall()]
    print(f"\nTables present: {tables}")

    cur.close()
    conn.close()
    print("\nConnection closed.")
    return error_count


if __name__ == '__main__':
    sys.exit(1 if main() else 0)

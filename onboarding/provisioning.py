"""
Account Provisioning
Domain: Onboarding

Creates a tenant and its first (admin) user: identity, organization,
profile, audit entry. Called by the signup page and POST /v2/auth/signup.

The identity provider and the store share no transaction, so a failed
step undoes the earlier ones by hand, most dependent record first.
"""

import re
import sys

from auth.validators import validate_signup, first_error, SERVER_SIGNUP_SCHEMA
from audit_service import log_audit, AuditAction


ADMIN_ROLE = 'admin'

SIGNUP_SUCCESS_MESSAGE = 'Signup successful. Please check your email to verify your account.'
SIGNUP_PENDING_MESSAGE = 'Signup failed. Please check your email for confirmation.'


def slugify(name: str) -> str:
    """URL-safe organization identifier: lower-case, runs of anything else collapsed to '-'."""
    return re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-')


def _rollback(identity, store, user_id, organization_id=None):
    """Undo what this call created. Every step runs even if an earlier one fails."""
    if organization_id is not None:
        try:
            store.delete('organizations', 'id', organization_id)
            print(f"[PROVISION] Rolled back organization {organization_id}", file=sys.stderr)
        except Exception as e:
            print(f"[PROVISION] Rollback failed, orphaned organization {organization_id}: {e}", file=sys.stderr)

    try:
        identity.delete_user(user_id)
        print(f"[PROVISION] Rolled back identity {user_id}", file=sys.stderr)
    except Exception as e:
        print(f"[PROVISION] Rollback failed, orphaned identity {user_id}: {e}", file=sys.stderr)


def create_account(form_data, identity, store) -> dict:
    """Create an identity, organization and admin profile for a new tenant.

    Args:
        form_data: Raw signup record (email, password, fullName,
            organization, department?, ip?).
        identity: Identity provider client (sign_up, delete_user).
        store: Relational store (insert, select, delete).

    Returns:
        {'success': True, 'message': ...} or {'success': False, 'error': ...}.
        Never raises.
    """
    data, violations = validate_signup(form_data, SERVER_SIGNUP_SCHEMA)
    if violations:
        return {'success': False, 'error': first_error(violations)}

    email = data['email']
    full_name = data['fullName']
    organization = data['organization']
    department = data.get('department')

    # 1. Identity
    try:
        user = identity.sign_up(email, data['password'], {
            'full_name': full_name,
            'organization': organization,
            'department': department,
        })
    except Exception as e:
        print(f"[SIGNUP] Identity creation failed for {email}: {e}", file=sys.stderr)
        return {'success': False, 'error': str(e)}

    if not user or not user.get('id'):
        # Provider accepted the request but returned no user; nothing to undo
        print(f"[SIGNUP] No user returned for {email}", file=sys.stderr)
        return {'success': False, 'error': SIGNUP_PENDING_MESSAGE}

    user_id = user['id']

    # 2. Organization
    try:
        rows = store.insert('organizations', [{
            'name': organization,
            'slug': slugify(organization),
        }])
        if not rows:
            raise RuntimeError('no organization record returned')
        organization_id = rows[0]['id']
    except Exception as e:
        print(f"[PROVISION] Organization creation failed for {email}: {e}", file=sys.stderr)
        _rollback(identity, store, user_id)
        return {'success': False, 'error': f'Failed to create organization: {e}'}

    # 3. Profile
    try:
        store.insert('profiles', [{
            'id': user_id,
            'email': email,
            'full_name': full_name,
            'department': department,
            'organization_id': organization_id,
            'role': ADMIN_ROLE,
        }])
    except Exception as e:
        print(f"[PROVISION] Profile creation failed for {email}: {e}", file=sys.stderr)
        _rollback(identity, store, user_id, organization_id=organization_id)
        return {'success': False, 'error': f'Failed to create user profile: {e}'}

    # 4. Audit (best-effort)
    log_audit(
        store,
        user_id=user_id,
        action=AuditAction.SIGNUP,
        table='auth',
        record_id=user_id,
        description=f'User signed up with email {email}',
        ip_address=data.get('ip'),
    )

    print(f"[PROVISION] Provisioned {email}: user={user_id} organization={organization_id}", file=sys.stderr)

    return {'success': True, 'message': SIGNUP_SUCCESS_MESSAGE}

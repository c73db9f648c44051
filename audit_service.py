"""
MuniFlow Audit Service
Append-only audit trail for account events (SOC 2)

Audit writes are best-effort: a failed write is reported on stderr and
never interrupts the operation being audited.
"""

import sys
import uuid
from datetime import datetime, timezone
from flask import request, has_request_context


# Action type constants
class AuditAction:
    SIGNUP = 'signup'


AUDIT_COLLECTION = 'audit_logs'


def get_client_ip():
    """Best guess at the caller's IP for the current request."""
    if not has_request_context():
        return None
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.remote_addr


def build_audit_entry(user_id, action, table, record_id, description, ip_address=None):
    """Build an audit log record with a fresh id and the current UTC time."""
    return {
        'id': str(uuid.uuid4()),
        'user_id': user_id,
        'action': action,
        'table': table,
        'record_id': record_id,
        'description': description,
        'ip_address': ip_address or None,
        'created_at': datetime.now(timezone.utc).isoformat(),
    }


def log_audit(store, user_id, action, table, record_id, description, ip_address=None):
    """
    Log an audit event to the store.

    Args:
        store: Relational store (insert/select/delete)
        user_id: Acting user's id
        action: Action type (use AuditAction constants)
        table: Collection or subsystem the action touched
        record_id: Id of the affected record
        description: Human-readable summary
        ip_address: Optional caller IP

    Returns:
        True if the entry was written, False otherwise
    """
    try:
        entry = build_audit_entry(user_id, action, table, record_id, description, ip_address)
        store.insert(AUDIT_COLLECTION, [entry])
        return True
    except Exception as e:
        # Don't let audit logging failures break the operation being audited
        print(f"[AUDIT] Warning: Failed to log audit event {action} for {user_id}: {e}", file=sys.stderr)
        return False


def query_audit_logs(store, user_id, action=None, limit=100):
    """Audit entries for a user, newest first."""
    where = {'user_id': user_id}
    if action:
        where['action'] = action
    return store.select(AUDIT_COLLECTION, where=where, order_by='created_at',
                        descending=True, limit=limit)

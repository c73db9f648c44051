"""
Signup Form Validation

Two schemas describe an acceptable signup record. The form schema is what
the signup page enforces before submitting; the server schema is what the
provisioning sequence enforces on every call, whoever the caller is.

The two are deliberately not identical: the form adds password composition
and organization length rules, the server adds the government email domain
filter.
"""

import re
from typing import Any, Dict, List, Tuple

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

# Only government-affiliated addresses may self-register
GOVERNMENT_SUFFIXES = ('gov', 'us', 'state', 'city', 'county', 'municipal')

PASSWORD_MIN_LENGTH = 12

PASSWORD_REQUIREMENTS = [
    'At least 12 characters',
    'At least 1 uppercase letter',
    'At least 1 lowercase letter',
    'At least 1 number',
]

# Fields that are never stripped or case-folded
_RAW_FIELDS = ('password',)


def validate_email(email: str) -> bool:
    """Basic email shape validation."""
    return bool(re.match(EMAIL_PATTERN, email))


def is_government_email(email: str) -> bool:
    """True if the address's domain ends in an institutional suffix."""
    if not validate_email(email):
        return False
    domain = email.rsplit('@', 1)[1].lower()
    return domain.rsplit('.', 1)[-1] in GOVERNMENT_SUFFIXES


def _required(message):
    def check(value):
        return len(value) > 0, message
    return check


def _min_length(length, message):
    def check(value):
        return len(value) >= length, message
    return check


def _max_length(length, message):
    def check(value):
        return len(value) <= length, message
    return check


def _matches(pattern, message):
    def check(value):
        return bool(re.search(pattern, value)), message
    return check


def _email(message):
    def check(value):
        return validate_email(value), message
    return check


def _government_email(message):
    def check(value):
        return is_government_email(value), message
    return check


# (field, required, missing message, checks)
SERVER_SIGNUP_SCHEMA = [
    ('email', True, 'Email is required', [
        _required('Email is required'),
        _email('Invalid email address'),
        _government_email('Must use a valid government email'),
    ]),
    ('password', True, 'Password is required', [
        _min_length(PASSWORD_MIN_LENGTH, 'Password must be at least 12 characters'),
    ]),
    ('fullName', True, 'Full name is required', [
        _required('Full name is required'),
    ]),
    ('organization', True, 'Organization name is required', [
        _required('Organization name is required'),
    ]),
    ('department', False, None, []),
    ('ip', False, None, []),
]

FORM_SIGNUP_SCHEMA = [
    ('email', True, 'Enter a valid email address', [
        _email('Enter a valid email address'),
    ]),
    ('password', True, 'Password must be at least 12 characters', [
        _min_length(PASSWORD_MIN_LENGTH, 'Password must be at least 12 characters'),
        _matches(r'[A-Z]', 'Must include at least one uppercase letter'),
        _matches(r'[a-z]', 'Must include at least one lowercase letter'),
        _matches(r'[0-9]', 'Must include at least one number'),
    ]),
    ('organization', True, 'Organization name must be at least 3 characters', [
        _min_length(3, 'Organization name must be at least 3 characters'),
        _max_length(100, 'Organization name must be at most 100 characters'),
    ]),
    ('fullName', True, 'Full name is required', [
        _required('Full name is required'),
    ]),
    ('department', False, None, []),
]


def _normalize(field: str, value: str) -> str:
    if field in _RAW_FIELDS:
        return value
    value = value.strip()
    if field == 'email':
        value = value.lower()
    return value


def validate_signup(data: Any, schema=SERVER_SIGNUP_SCHEMA) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
    """
    Validate a candidate signup record against a schema.

    Args:
        data: Raw mapping (JSON body, form data, ...)
        schema: SERVER_SIGNUP_SCHEMA or FORM_SIGNUP_SCHEMA

    Returns:
        (cleaned, violations). cleaned holds the normalized values of the
        schema's fields; violations is an ordered list of
        {'field': ..., 'message': ...}, one per failing field.
    """
    if not hasattr(data, 'get'):
        return {}, [{'field': None, 'message': 'Invalid input'}]

    cleaned = {}
    violations = []

    for field, required, missing_message, checks in schema:
        value = data.get(field)

        if value is None:
            if required:
                violations.append({'field': field, 'message': missing_message})
            else:
                cleaned[field] = None
            continue

        if not isinstance(value, str):
            violations.append({'field': field, 'message': f'{field} must be text'})
            continue

        value = _normalize(field, value)

        for check in checks:
            ok, message = check(value)
            if not ok:
                violations.append({'field': field, 'message': message})
                break
        else:
            cleaned[field] = value if (value or required) else None

    return cleaned, violations


def first_error(violations: List[Dict[str, str]]) -> str:
    """The user-facing message for a failed validation."""
    if not violations:
        return 'Invalid input'
    return violations[0]['message'] or 'Invalid input'


def field_errors(violations: List[Dict[str, str]]) -> Dict[str, str]:
    """Map each field to its first violation message, for form rendering."""
    errors = {}
    for violation in violations:
        errors.setdefault(violation['field'], violation['message'])
    return errors

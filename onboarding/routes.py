"""
Onboarding Pages

GET  /              - Redirect to the signup page
GET  /signup        - Signup form
POST /signup        - Validate the form and create the account
GET  /verify-email  - "Check your email" notice
"""

import os
from html import escape
from string import Template

from flask import Blueprint, request, make_response, redirect

from audit_service import get_client_ip
from auth.validators import (
    validate_signup, field_errors, FORM_SIGNUP_SCHEMA, PASSWORD_REQUIREMENTS,
)
from onboarding.provisioning import create_account, SIGNUP_SUCCESS_MESSAGE

APP_NAME = os.environ.get('APP_NAME', 'MuniFlow')
APP_TAGLINE = 'Municipal workflows made simple'

GENERIC_ERROR = 'An error occurred. Please try again.'

FORM_FIELDS = ('email', 'organization', 'fullName', 'department')


# ============================================================
# Page HTML
# ============================================================

LAYOUT_HTML = Template(r"""<!DOCTYPE html>
<html lang="en"><head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>$title</title>
<style>
  * { box-sizing: border-box; margin: 0; padding: 0; }
  body {
    font-family: system-ui, -apple-system, 'Segoe UI', sans-serif;
    background: #f9fafb;
    color: #111827;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    justify-content: center;
    padding: 3rem 1rem;
  }
  .header { text-align: center; margin-bottom: 2rem; }
  .logo { font-size: 2.25rem; font-weight: 700; color: #1d4ed8; }
  .tagline { margin-top: 0.5rem; font-size: 0.875rem; color: #4b5563; }
  .card {
    width: 100%;
    max-width: 28rem;
    margin: 0 auto;
    background: #fff;
    border: 1px solid #f3f4f6;
    border-radius: 0.5rem;
    box-shadow: 0 10px 15px -3px rgba(0,0,0,.1);
    padding: 2rem 2.5rem;
  }
  label { display: block; font-size: 0.875rem; font-weight: 500; color: #374151; }
  .optional { color: #9ca3af; }
  input {
    margin-top: 0.25rem;
    display: block;
    width: 100%;
    padding: 0.5rem;
    border: 1px solid #d1d5db;
    border-radius: 0.375rem;
    font-size: 0.875rem;
  }
  input.invalid { border-color: #dc2626; }
  .field { margin-bottom: 1.5rem; }
  .field-error { margin-top: 0.25rem; color: #dc2626; font-size: 0.75rem; }
  .requirements { margin-top: 0.5rem; font-size: 0.75rem; color: #6b7280; list-style: none; }
  .banner { border-radius: 0.25rem; padding: 0.5rem 1rem; font-size: 0.875rem; margin-bottom: 1.5rem; }
  .banner.error { background: #fef2f2; border: 1px solid #dc2626; color: #dc2626; }
  .banner.success { background: #f0fdf4; border: 1px solid #16a34a; color: #16a34a; }
  button {
    width: 100%;
    padding: 0.5rem 1rem;
    border: none;
    border-radius: 0.375rem;
    background: #1d4ed8;
    color: #fff;
    font-size: 0.875rem;
    font-weight: 500;
    cursor: pointer;
  }
  button:disabled { opacity: 0.6; cursor: default; }
  .notice { text-align: center; }
  .notice h2 { font-size: 1.5rem; font-weight: 700; color: #1d4ed8; margin-bottom: 1rem; }
  .notice p { color: #4b5563; margin-bottom: 1rem; }
  .notice .hint { font-size: 0.875rem; color: #6b7280; }
</style>
</head><body>
<div class="header">
  <div class="logo">$app_name</div>
  <p class="tagline">$tagline</p>
</div>
<div class="card">
$body
</div>
</body></html>""")


FIELD_HTML = Template(r"""  <div class="field">
    <label for="$name">$label$optional</label>
    <input id="$name" name="$name" type="$type" autocomplete="$autocomplete" value="$value"$attrs$invalid>
$extra$error  </div>
""")


SIGNUP_BODY = Template(r"""<form id="signup-form" method="post" action="/signup" novalidate>
$banner$fields  <button type="submit" id="submit-btn">Sign Up</button>
</form>
<script>
  document.getElementById('signup-form').addEventListener('submit', function () {
    var btn = document.getElementById('submit-btn');
    btn.disabled = true;
    btn.textContent = 'Signing up...';
  });
</script>""")


VERIFY_EMAIL_BODY = r"""<div class="notice">
  <h2>Check Your Email</h2>
  <p>
    We've sent a confirmation link to your email address.
    Please click the link to verify your account.
  </p>
  <p class="hint">Didn't receive it? Check your spam folder or contact support.</p>
</div>"""


# name, label, type, autocomplete, optional, attrs
_FORM_INPUTS = [
    ('email', 'Email address', 'email', 'email', False, ' required'),
    ('password', 'Password', 'password', 'new-password', False, ' required minlength="12"'),
    ('organization', 'Organization Name', 'text', 'organization', False, ' required minlength="3" maxlength="100"'),
    ('fullName', 'Full Name', 'text', 'name', False, ' required'),
    ('department', 'Department', 'text', 'organization-unit', True, ''),
]


def _render_page(title, body, status=200):
    html = LAYOUT_HTML.safe_substitute(
        title=escape(title),
        app_name=escape(APP_NAME),
        tagline=escape(APP_TAGLINE),
        body=body,
    )
    return make_response(html, status, {'Content-Type': 'text/html; charset=utf-8'})


def render_signup_form(values=None, errors=None, server_error=None, success=None):
    """Build the signup form body. Password is never echoed back."""
    values = values or {}
    errors = errors or {}

    fields = []
    for name, label, input_type, autocomplete, optional, attrs in _FORM_INPUTS:
        value = '' if name == 'password' else (values.get(name) or '')
        extra = ''
        if name == 'password':
            items = ''.join(f'      <li>{escape(req)}</li>\n' for req in PASSWORD_REQUIREMENTS)
            extra = f'    <ul class="requirements">\n{items}    </ul>\n'
        error = ''
        if errors.get(name):
            error = f'    <p class="field-error">{escape(errors[name])}</p>\n'
        fields.append(FIELD_HTML.safe_substitute(
            name=name,
            label=escape(label),
            optional=' <span class="optional">(optional)</span>' if optional else '',
            type=input_type,
            autocomplete=autocomplete,
            value=escape(value),
            attrs=attrs,
            invalid=' class="invalid"' if errors.get(name) else '',
            extra=extra,
            error=error,
        ))

    banner = ''
    if server_error:
        banner = f'  <div class="banner error" role="alert">{escape(server_error)}</div>\n'
    elif success:
        banner = f'  <div class="banner success" role="status">{escape(success)}</div>\n'

    return SIGNUP_BODY.safe_substitute(banner=banner, fields=''.join(fields))


def init_pages(identity, store):
    """Initialize onboarding pages with the identity provider and store."""
    pages_bp = Blueprint('pages', __name__)

    @pages_bp.route('/', methods=['GET'])
    def index():
        return redirect('/signup')

    @pages_bp.route('/signup', methods=['GET'])
    def signup_form():
        return _render_page(f'Sign up - {APP_NAME}', render_signup_form())

    @pages_bp.route('/signup', methods=['POST'])
    def signup_submit():
        """Validate with the form rules, then hand off to create_account."""
        form = request.form
        values = {name: form.get(name, '') for name in FORM_FIELDS}

        _, violations = validate_signup(form, FORM_SIGNUP_SCHEMA)
        if violations:
            body = render_signup_form(values=values, errors=field_errors(violations))
            return _render_page(f'Sign up - {APP_NAME}', body, 400)

        result = create_account({
            'email': form.get('email'),
            'password': form.get('password'),
            'organization': form.get('organization'),
            'fullName': form.get('fullName'),
            'department': form.get('department'),
            'ip': get_client_ip(),
        }, identity, store)

        if result.get('success'):
            body = render_signup_form(success=result.get('message') or SIGNUP_SUCCESS_MESSAGE)
            return _render_page(f'Sign up - {APP_NAME}', body, 200)

        body = render_signup_form(values=values, server_error=result.get('error') or GENERIC_ERROR)
        return _render_page(f'Sign up - {APP_NAME}', body, 400)

    @pages_bp.route('/verify-email', methods=['GET'])
    def verify_email():
        return _render_page(f'Verify your email - {APP_NAME}', VERIFY_EMAIL_BODY)

    return pages_bp

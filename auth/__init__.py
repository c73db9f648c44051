"""
Auth Module for MuniFlow
Domain: Identity & Signup

Identity provider access, signup form validation and the public signup
endpoint. Session handling, password reset and MFA live with the identity
provider, not here.
"""

import os

# Identity provider configuration (GoTrue-compatible REST API)
IDENTITY_URL = os.environ.get('IDENTITY_URL', '')
IDENTITY_ANON_KEY = os.environ.get('IDENTITY_ANON_KEY', '')
IDENTITY_SERVICE_KEY = os.environ.get('IDENTITY_SERVICE_KEY', '')
IDENTITY_TIMEOUT = int(os.environ.get('IDENTITY_TIMEOUT', 10))

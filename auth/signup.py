"""
Signup Endpoint
Domain: Identity & Signup

POST /v2/auth/signup - Create tenant + admin account (public)
"""

from flask import Blueprint, request, jsonify

from audit_service import get_client_ip
from onboarding.provisioning import create_account


def init_signup(identity, store):
    """Initialize signup routes with the identity provider and store."""
    signup_bp = Blueprint('signup', __name__, url_prefix='/v2/auth')

    @signup_bp.route('/signup', methods=['POST'])
    def signup():
        """
        Create a new account and organization.

        Request body:
        {
            "email": "clerk@springfield.gov",
            "password": "Str0ngPassw0rd!",
            "fullName": "J Clerk",
            "organization": "Springfield",
            "department": "Public Works"
        }

        Returns 201:
        {
            "success": true,
            "message": "Signup successful. Please check your email to verify your account."
        }

        Returns 400:
        {
            "success": false,
            "error": "Must use a valid government email"
        }
        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}

        # The audit IP comes from the request, never from the body
        data = dict(data, ip=get_client_ip())

        result = create_account(data, identity, store)
        return jsonify(result), 201 if result['success'] else 400

    return signup_bp

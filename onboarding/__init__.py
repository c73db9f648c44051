"""
Onboarding Module for MuniFlow
Domain: Tenant Signup & Provisioning

Endpoints:
- GET/POST /signup   (public signup form)
- GET /verify-email  (post-signup notice)
"""

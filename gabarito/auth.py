"""
Session authentication and role gate for Gabarito.
Validates Bearer tokens on every route except public endpoints, then
re-reads the identity so role changes apply immediately.
"""
from functools import wraps

from flask import current_app, g, request

from .errors import Forbidden, RoleNotSet, Unauthenticated
from .models import Role


# Routes that don't require authentication
PUBLIC_PREFIXES = [
    '/auth/',              # Signup and login
    '/form/',              # Public distribution links
]

PUBLIC_EXACT = [
    '/health',
]

PUBLIC_READS = [
    '/questions',          # Question bank search
]


def get_services():
    """Service container registered by create_app."""
    return current_app.extensions['gabarito']


def is_public_route(method, path):
    """Check if a route is public (no auth required)."""
    if path in PUBLIC_EXACT:
        return True
    if method == 'GET' and path in PUBLIC_READS:
        return True
    for prefix in PUBLIC_PREFIXES:
        if path.startswith(prefix):
            return True
    return False


def bearer_token(header):
    if not header or not header.startswith('Bearer '):
        return None
    return header[7:].strip() or None


def authenticate(token, services):
    """Resolve a bearer token to the stored Identity."""
    if not token:
        raise Unauthenticated("Authentication required", code="MISSING_TOKEN")

    payload = services.accounts.decode_token(token)
    if payload is None:
        raise Unauthenticated("Invalid or expired token", code="INVALID_OR_EXPIRED_TOKEN")

    identity = services.identities.get(payload.get('sub'))
    if identity is None:
        raise Unauthenticated("Invalid or expired token", code="INVALID_OR_EXPIRED_TOKEN")
    return identity


def require_role(identity, allowed_roles):
    """RoleNotSet is kept apart from Forbidden so clients can prompt for a role."""
    if identity.role == Role.UNSET:
        raise RoleNotSet()
    if identity.role not in allowed_roles:
        raise Forbidden()


def roles_required(*roles):
    """View decorator: the authenticated identity must hold one of ``roles``."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            require_role(g.identity, roles)
            return view(*args, **kwargs)
        return wrapped
    return decorator


teacher_required = roles_required(Role.TEACHER)


def init_auth(app):
    """
    Register the before_request auth hook on the Flask app.
    Call this BEFORE registering blueprints.
    """
    @app.before_request
    def check_auth():
        g.identity = None

        # CORS preflight carries no credentials
        if request.method == 'OPTIONS':
            return None

        # Unmatched paths and methods fall through to Flask's 404/405
        if request.url_rule is None:
            return None

        if is_public_route(request.method, request.path):
            return None

        token = bearer_token(request.headers.get('Authorization', ''))
        identity = authenticate(token, get_services())

        # Attach user info to Flask's g object for use in route handlers
        g.identity = identity
        g.user_id = identity.id

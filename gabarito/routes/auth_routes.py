"""
Auth Routes for Gabarito.
Handles signup, login, the current account and the one-time role choice.
"""
import logging
from flask import Blueprint, request, jsonify, g

from ..auth import get_services
from ..models import LoginRequest, RoleRequest, SignupRequest, parse
from ..rate_limit import rate_limited

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.route('/auth/signup', methods=['POST'])
@rate_limited('auth')
def signup():
    """Create an account and return a session. PUBLIC endpoint."""
    data = parse(SignupRequest, request.get_json(silent=True))
    session = get_services().accounts.signup(data.name, data.email, data.password, data.role)
    return jsonify(session), 201


@auth_bp.route('/auth/login', methods=['POST'])
@rate_limited('auth')
def login():
    """Verify credentials and return a session. PUBLIC endpoint."""
    data = parse(LoginRequest, request.get_json(silent=True))
    session = get_services().accounts.login(data.email, data.password)
    return jsonify(session)


@auth_bp.route('/me', methods=['GET'])
def me():
    return jsonify({"user": g.identity.to_public()})


@auth_bp.route('/me/role', methods=['POST'])
def choose_role():
    """
    Set the caller's role (student or teacher) once.
    Returns a fresh session so the token's embedded role matches.
    """
    data = parse(RoleRequest, request.get_json(silent=True))
    services = get_services()
    identity = services.accounts.assign_role(g.identity.id, data.role)
    return jsonify(services.accounts.issue_session(identity))

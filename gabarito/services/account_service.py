"""
Credential and session service.

Passwords are hashed with bcrypt (Flask-Bcrypt). Sessions are HS256 JWTs
carrying the identity id and the role at issuance time.
"""
import logging
from datetime import timedelta

import jwt

from ..errors import Conflict, DuplicateEmail, InvalidCredentials, InvalidInput, InvalidRole, NotFound
from ..models import Role, collapse_whitespace, utcnow
from .identity_store import normalize_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72
JWT_ALGORITHM = "HS256"


class AccountService:
    def __init__(self, identities, bcrypt, jwt_secret, session_ttl_days=7, bcrypt_rounds=10):
        self.identities = identities
        self.bcrypt = bcrypt
        self.jwt_secret = jwt_secret
        self.session_ttl_days = session_ttl_days
        self.bcrypt_rounds = bcrypt_rounds
        self._dummy_hash = None

    # ============ Sessions ============

    def issue_session(self, identity):
        now = utcnow()
        payload = {
            "sub": identity.id,
            "role": identity.role.value,
            "iat": now,
            "exp": now + timedelta(days=self.session_ttl_days),
        }
        token = jwt.encode(payload, self.jwt_secret, algorithm=JWT_ALGORITHM)
        return {"token": token, "user": identity.to_public()}

    def decode_token(self, token):
        """
        Validate a session token and return the decoded payload.
        Returns None if invalid or expired.
        """
        try:
            return jwt.decode(token, self.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None

    # ============ Accounts ============

    def signup(self, name, email, password, requested_role=None):
        name = collapse_whitespace(name)
        email = normalize_email(email)
        if not name:
            raise InvalidInput("Name is required")
        if not email or "@" not in email:
            raise InvalidInput("A valid email is required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInput(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInput(f"Password must have at most {MAX_PASSWORD_BYTES} bytes")

        if self.identities.get_by_email(email):
            raise DuplicateEmail()

        identity = self.identities.create(name, email, self._hash(password), Role.from_request(requested_role))
        logger.info("Account created: %s (role=%s)", email, identity.role.value)
        return self.issue_session(identity)

    def _hash(self, password):
        return self.bcrypt.generate_password_hash(password, rounds=self.bcrypt_rounds).decode("utf-8")

    def _check(self, password_hash, password):
        if not password or len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            return False
        return self.bcrypt.check_password_hash(password_hash, password)

    def login(self, email, password):
        identity = self.identities.get_by_email(email)
        if identity is None:
            # Unknown accounts still pay for a hash check
            if self._dummy_hash is None:
                self._dummy_hash = self._hash("not-a-real-password")
            self._check(self._dummy_hash, password)
            raise InvalidCredentials()
        if not self._check(identity.password_hash, password):
            raise InvalidCredentials()
        logger.info("Login: %s", identity.email)
        return self.issue_session(identity)

    def assign_role(self, identity_id, role):
        """Set the role once. Repeating the same role is a no-op; switching is refused."""
        value = role.value if isinstance(role, Role) else role
        if value not in (Role.STUDENT.value, Role.TEACHER.value):
            raise InvalidRole()
        role = Role(value)

        identity = self.identities.get(identity_id)
        if identity is None:
            raise NotFound("Account not found")
        if identity.role == role:
            return identity
        if identity.role != Role.UNSET:
            raise Conflict("Role already set", code="ROLE_ALREADY_SET")

        updated = self.identities.set_role(identity_id, role)
        logger.info("Role assigned: %s -> %s", identity.email, role.value)
        return updated

"""
Test: Credential and session service: signup, login, role choice, tokens.
"""
import jwt
import pytest
from flask_bcrypt import Bcrypt

from gabarito.errors import Conflict, DuplicateEmail, InvalidCredentials, InvalidInput, InvalidRole, NotFound
from gabarito.models import Role
from gabarito.services import AccountService


class CountingBcrypt(Bcrypt):
    def __init__(self):
        super().__init__()
        self.checks = 0

    def check_password_hash(self, pw_hash, password):
        self.checks += 1
        return super().check_password_hash(pw_hash, password)


class TestSignup:
    def test_returns_session(self, accounts):
        session = accounts.signup("Ana", "  Ana@Escola.COM ", "segredo123", "teacher")
        assert session["user"]["email"] == "ana@escola.com"
        assert session["user"]["role"] == "teacher"
        assert accounts.decode_token(session["token"])["sub"] == session["user"]["id"]

    def test_password_is_hashed(self, accounts, identities):
        accounts.signup("Ana", "ana@escola.com", "segredo123")
        stored = identities.get_by_email("ana@escola.com")
        assert stored.password_hash != "segredo123"
        assert stored.password_hash.startswith("$2")

    @pytest.mark.parametrize("requested", [None, "", "admin", "Teacher", "unset"])
    def test_other_roles_stay_unset(self, accounts, requested):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123", requested)
        assert session["user"]["role"] == "unset"

    def test_duplicate_email_case_insensitive(self, accounts):
        accounts.signup("Ana", "ana@escola.com", "segredo123")
        with pytest.raises(DuplicateEmail):
            accounts.signup("Outra Ana", "ANA@escola.com ", "segredo456")

    @pytest.mark.parametrize("name,email,password", [
        ("", "ana@escola.com", "segredo123"),
        ("Ana", "not-an-email", "segredo123"),
        ("Ana", "ana@escola.com", "123"),
    ])
    def test_invalid_input(self, accounts, name, email, password):
        with pytest.raises(InvalidInput):
            accounts.signup(name, email, password)

    @pytest.mark.parametrize("password", ["x" * 73, "é" * 37])
    def test_password_over_72_bytes(self, accounts, identities, password):
        with pytest.raises(InvalidInput):
            accounts.signup("Ana", "ana@escola.com", password)
        assert identities.get_by_email("ana@escola.com") is None

    def test_password_of_72_bytes(self, accounts):
        session = accounts.signup("Ana", "ana@escola.com", "x" * 72)
        assert accounts.login("ana@escola.com", "x" * 72)["user"]["id"] == session["user"]["id"]


class TestLogin:
    def test_valid(self, accounts):
        accounts.signup("Ana", "ana@escola.com", "segredo123", "student")
        session = accounts.login("ANA@escola.com", "segredo123")
        assert session["user"]["role"] == "student"

    def test_same_failure_for_unknown_and_wrong_password(self, accounts):
        accounts.signup("Ana", "ana@escola.com", "segredo123")
        with pytest.raises(InvalidCredentials) as wrong:
            accounts.login("ana@escola.com", "errada")
        with pytest.raises(InvalidCredentials) as unknown:
            accounts.login("ninguem@escola.com", "segredo123")
        assert wrong.value.message == unknown.value.message

    def test_long_password_is_invalid_credentials(self, accounts):
        accounts.signup("Ana", "ana@escola.com", "segredo123")
        with pytest.raises(InvalidCredentials):
            accounts.login("ana@escola.com", "x" * 80)
        with pytest.raises(InvalidCredentials):
            accounts.login("ninguem@escola.com", "x" * 80)

    def test_unknown_email_still_checks_a_hash(self, identities):
        bcrypt = CountingBcrypt()
        service = AccountService(identities, bcrypt, "test-secret", bcrypt_rounds=4)
        with pytest.raises(InvalidCredentials):
            service.login("ninguem@escola.com", "segredo123")
        with pytest.raises(InvalidCredentials):
            service.login("outro@escola.com", "segredo123")
        assert bcrypt.checks == 2


class TestAssignRole:
    def test_sets_role(self, accounts):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123")
        identity = accounts.assign_role(session["user"]["id"], "teacher")
        assert identity.role == Role.TEACHER

    def test_same_role_is_noop(self, accounts):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123", "student")
        assert accounts.assign_role(session["user"]["id"], Role.STUDENT).role == Role.STUDENT

    def test_cannot_switch(self, accounts):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123", "student")
        with pytest.raises(Conflict):
            accounts.assign_role(session["user"]["id"], "teacher")

    @pytest.mark.parametrize("role", ["unset", "admin", "", None])
    def test_invalid_role(self, accounts, role):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123")
        with pytest.raises(InvalidRole):
            accounts.assign_role(session["user"]["id"], role)

    def test_unknown_identity(self, accounts):
        with pytest.raises(NotFound):
            accounts.assign_role("missing", "student")


class TestTokens:
    def test_seven_day_expiry(self, accounts):
        session = accounts.signup("Ana", "ana@escola.com", "segredo123")
        payload = accounts.decode_token(session["token"])
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_expired(self, identities):
        service = AccountService(identities, Bcrypt(), "test-secret", session_ttl_days=-1, bcrypt_rounds=4)
        session = service.signup("Ana", "ana@escola.com", "segredo123")
        assert service.decode_token(session["token"]) is None

    def test_wrong_secret(self, accounts):
        token = jwt.encode({"sub": "x"}, "other-secret", algorithm="HS256")
        assert accounts.decode_token(token) is None

    def test_garbage(self, accounts):
        assert accounts.decode_token("not.a.token") is None

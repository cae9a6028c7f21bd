"""
Shared test fixtures for Gabarito.
Every app runs on the in-memory store with cheap bcrypt rounds.
Zero network calls.
"""
import pytest
from flask_bcrypt import Bcrypt

from gabarito.app import create_app
from gabarito.services import (
    AccountService, CatalogService, DistributionService, IdentityStore,
    QuestionBank, SubmissionService,
)
from gabarito.storage import MemoryStore

TEST_CONFIG = {
    "storage_backend": "memory",
    "jwt_secret": "test-secret",
    "bcrypt_log_rounds": 4,
    "auth_rate_limit": 1000,
    "public_base_url": "",
    "log_level": "WARNING",
}

PROVA_1_QUESTIONS = [
    {"number": 1, "subject": "Física"},
    {"number": 2, "subject": "Física"},
]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def question_bank(store):
    return QuestionBank(store)


@pytest.fixture
def catalog(store, question_bank):
    return CatalogService(store, question_bank)


@pytest.fixture
def submissions(store, catalog):
    return SubmissionService(store, catalog)


@pytest.fixture
def distribution(store, catalog, submissions):
    return DistributionService(store, catalog, submissions, token_bytes=9,
                               public_base_url="https://provas.example.com")


@pytest.fixture
def identities(store):
    return IdentityStore(store)


@pytest.fixture
def accounts(identities):
    return AccountService(identities, Bcrypt(), "test-secret", session_ttl_days=7, bcrypt_rounds=4)


@pytest.fixture
def prova_1(catalog):
    """Assessment 'Prova 1' with two physics questions and key [A, B]."""
    assessment = catalog.create_assessment("Prova 1", 2, PROVA_1_QUESTIONS)
    catalog.save_answer_key(assessment.id, [
        {"questionNumber": 1, "correctAnswer": "A"},
        {"questionNumber": 2, "correctAnswer": "B"},
    ])
    return assessment


@pytest.fixture
def app(store):
    return create_app(TEST_CONFIG, store=store)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """Sign up through the API and return the session payload."""
    def _signup(role=None, email=None, name="Maria Silva"):
        body = {
            "name": name,
            "email": email or f"{role or 'unset'}@escola.example.com",
            "password": "segredo123",
        }
        if role:
            body["role"] = role
        response = client.post("/auth/signup", json=body)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _signup


def auth_header(session):
    return {"Authorization": "Bearer " + session["token"]}


@pytest.fixture
def teacher_headers(signup):
    return auth_header(signup("teacher", name="Prof. Ana"))


@pytest.fixture
def student_headers(signup):
    return auth_header(signup("student", name="João Souza"))


@pytest.fixture
def unset_headers(signup):
    return auth_header(signup())


@pytest.fixture
def bearer():
    """Build an Authorization header from a session payload."""
    return auth_header

"""
Public distribution links.

A link is an unguessable url-safe token bound to one assessment. Anyone
holding it can open the fill-in form and submit answers without an account.
A form is only served once its assessment has an authoritative key.
"""
import logging
import secrets

from ..config import MIN_LINK_TOKEN_BYTES
from ..errors import AssessmentIncomplete, IncompleteSubmission, LinkNotFound
from ..models import LETTERS, DistributionLink, collapse_whitespace, normalize_letter

logger = logging.getLogger(__name__)

TABLE = "forms"
ANONYMOUS_NAME = "Anônimo"


def answer_field(number):
    """Form field name carrying the answer for question ``number``."""
    return f"q{number}"


class DistributionService:
    def __init__(self, store, catalog, submissions, token_bytes=9, public_base_url=""):
        self.store = store
        self.catalog = catalog
        self.submissions = submissions
        self.token_bytes = max(int(token_bytes), MIN_LINK_TOKEN_BYTES)
        self.public_base_url = (public_base_url or "").rstrip('/')

    def generate_token(self):
        """Generate a unique url-safe token from the system CSPRNG."""
        while True:
            token = secrets.token_urlsafe(self.token_bytes)
            if self.store.find_one(TABLE, {"token": token}) is None:
                return token

    def link_url(self, token, host_url=None):
        base = self.public_base_url or (host_url or "").rstrip('/')
        return f"{base}/form/{token}"

    def create_link(self, assessment_id, title=None, description=None, require_name=True, host_url=None):
        assessment = self.catalog.require_assessment(assessment_id)
        link = DistributionLink(
            token=self.generate_token(),
            assessment_id=assessment.id,
            title=collapse_whitespace(title) or assessment.name,
            description=(description or "").strip(),
            require_name=bool(require_name),
        )
        self.store.insert(TABLE, link.to_document())
        logger.info("Form link %s created for assessment %s", link.id, assessment.id)
        return {"token": link.token, "url": self.link_url(link.token, host_url), "link": link}

    def get_link(self, token):
        doc = self.store.find_one(TABLE, {"token": token}) if token else None
        if doc is None:
            raise LinkNotFound()
        return DistributionLink.from_document(doc)

    def _resolve(self, token):
        link = self.get_link(token)
        assessment = self.catalog.get_assessment(link.assessment_id)
        if assessment is None:
            raise LinkNotFound()
        if self.catalog.authoritative_key(assessment.id) is None:
            raise AssessmentIncomplete()
        return link, assessment

    def render_form(self, token):
        """Question list for the public form. Never includes the key."""
        link, assessment = self._resolve(token)
        return {
            "token": link.token,
            "title": link.title,
            "description": link.description,
            "requireName": link.require_name,
            "assessmentName": assessment.name,
            "questions": [
                {"number": q.number, "subject": q.subject, "field": answer_field(q.number),
                 "choices": list(LETTERS)}
                for q in sorted(assessment.questions, key=lambda q: q.number)
            ],
        }

    def submit_form(self, token, form_fields):
        link, assessment = self._resolve(token)
        if not isinstance(form_fields, dict):
            form_fields = {}

        answers = [
            {"question_number": q.number, "answer": normalize_letter(form_fields.get(answer_field(q.number)))}
            for q in assessment.questions
        ]
        missing = sorted(a["question_number"] for a in answers if not a["answer"])
        if missing:
            raise IncompleteSubmission(details={"missing": missing})

        student_name = ANONYMOUS_NAME
        if link.require_name:
            student_name = collapse_whitespace(form_fields.get("student_name")) or ANONYMOUS_NAME

        submission = self.submissions.submit(assessment.id, student_name, answers)
        return {"submission": submission, "link": link}

    def clear_all(self):
        return self.store.delete_all(TABLE)

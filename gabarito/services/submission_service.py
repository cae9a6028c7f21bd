"""
Submission store: graded student submissions, newest first.
"""
import logging

from ..errors import InvalidInput, NoAnswerKey
from ..models import StudentSubmission, SubmittedAnswer, collapse_whitespace, parse
from .grading_service import grade, summarize

logger = logging.getLogger(__name__)

TABLE = "student_answers"


class SubmissionService:
    def __init__(self, store, catalog):
        self.store = store
        self.catalog = catalog

    def submit(self, assessment_id, student_name, answers, identity_id=None):
        """Grade ``answers`` against the authoritative key and persist the result."""
        student_name = collapse_whitespace(student_name)
        if not student_name:
            raise InvalidInput("Student name is required")
        answers = [parse(SubmittedAnswer, a) for a in (answers or [])]
        if not answers:
            raise InvalidInput("At least one answer is required")

        assessment = self.catalog.require_assessment(assessment_id)
        key = self.catalog.authoritative_key(assessment.id)
        if key is None:
            raise NoAnswerKey()

        subjects = {q.number: q.subject for q in assessment.questions}
        graded = grade(answers, key, subjects)
        summary = summarize(graded)

        submission = StudentSubmission(
            assessment_id=assessment.id,
            student_name=student_name,
            identity_id=identity_id,
            answers=graded,
            score=summary["score"],
            total=summary["total"],
        )
        self.store.insert(TABLE, submission.to_document())
        logger.info("Submission %s for assessment %s scored %d/%d",
                    submission.id, assessment.id, submission.score, submission.total)
        return submission

    def list_by_assessment(self, assessment_id):
        docs = self.store.find(TABLE, where={"assessment_id": assessment_id},
                               order_by="created_at", desc=True)
        return [StudentSubmission.from_document(d) for d in docs]

    def clear_all(self):
        return self.store.delete_all(TABLE)

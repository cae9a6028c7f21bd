"""
Assessment catalog: assessments and their append-only answer-key history.

The authoritative key for an assessment is the most recently created
AnswerKey; older keys are kept as history and never rewritten.
"""
import logging

from ..errors import AssessmentNotFound, InvalidInput, QuestionsNotFound
from ..models import AnswerKey, Assessment, AssessmentQuestion, KeyEntry, collapse_whitespace, parse

logger = logging.getLogger(__name__)

ASSESSMENTS = "assessments"
ANSWER_KEYS = "answer_keys"


def _require_name(name):
    name = collapse_whitespace(name)
    if not name:
        raise InvalidInput("Assessment name is required")
    return name


class CatalogService:
    def __init__(self, store, question_bank=None):
        self.store = store
        self.question_bank = question_bank

    # ============ Assessments ============

    def create_assessment(self, name, question_count, questions, created_by=None):
        name = _require_name(name)
        if isinstance(question_count, bool) or not isinstance(question_count, int) or question_count < 1:
            raise InvalidInput("questionCount must be a positive integer")

        questions = [parse(AssessmentQuestion, q) for q in (questions or [])]
        if len(questions) != question_count:
            raise InvalidInput(
                f"questionCount is {question_count} but {len(questions)} questions were sent")

        numbers = [q.number for q in questions]
        if any(n < 1 for n in numbers):
            raise InvalidInput("Question numbers start at 1")
        if len(set(numbers)) != len(numbers):
            raise InvalidInput("Question numbers must be unique")

        assessment = Assessment(
            name=name,
            question_count=question_count,
            questions=questions,
            created_by=created_by,
        )
        self.store.insert(ASSESSMENTS, assessment.to_document())
        logger.info("Assessment created: %s (%d questions)", assessment.id, question_count)
        return assessment

    def create_assessment_from_bank(self, name, question_ids, created_by=None):
        """Build an assessment and its answer key from bank question ids, numbered 1..N in order."""
        name = _require_name(name)
        question_ids = [str(qid).strip() for qid in (question_ids or [])]
        if not question_ids or not all(question_ids):
            raise InvalidInput("questionIds must be a non-empty list of ids")
        if len(set(question_ids)) != len(question_ids):
            raise InvalidInput("questionIds must not repeat")
        if self.question_bank is None:
            raise QuestionsNotFound("Question bank is not available")

        found = self.question_bank.get_many(question_ids)
        missing = [qid for qid in question_ids if qid not in found]
        if missing:
            raise QuestionsNotFound(details={"missing": missing})

        bank_questions = [found[qid] for qid in question_ids]
        assessment = Assessment(
            name=name,
            question_count=len(bank_questions),
            questions=[AssessmentQuestion(number=i, subject=q.subject)
                       for i, q in enumerate(bank_questions, start=1)],
            created_by=created_by,
        )
        key = AnswerKey(
            assessment_id=assessment.id,
            answers=[KeyEntry(question_number=i, correct_answer=q.correct_answer)
                     for i, q in enumerate(bank_questions, start=1)],
        )
        self.store.insert(ASSESSMENTS, assessment.to_document())
        self.store.insert(ANSWER_KEYS, key.to_document())
        logger.info("Assessment %s built from %d bank questions", assessment.id, len(bank_questions))
        return assessment, key

    def get_assessment(self, assessment_id):
        if not assessment_id:
            return None
        doc = self.store.find_one(ASSESSMENTS, {"id": assessment_id})
        return Assessment.from_document(doc) if doc else None

    def require_assessment(self, assessment_id):
        assessment = self.get_assessment(assessment_id)
        if assessment is None:
            raise AssessmentNotFound()
        return assessment

    def list_assessments(self):
        docs = self.store.find(ASSESSMENTS, order_by="created_at", desc=True)
        return [Assessment.from_document(d) for d in docs]

    def latest_assessment(self):
        docs = self.store.find(ASSESSMENTS, order_by="created_at", desc=True, limit=1)
        return Assessment.from_document(docs[0]) if docs else None

    # ============ Answer keys ============

    def save_answer_key(self, assessment_id, answers):
        self.require_assessment(assessment_id)
        entries = [parse(KeyEntry, a) for a in (answers or [])]
        if not entries:
            raise InvalidInput("An answer key needs at least one answer")
        numbers = [e.question_number for e in entries]
        if len(set(numbers)) != len(numbers):
            raise InvalidInput("Each question may appear only once in a key")

        key = AnswerKey(assessment_id=assessment_id, answers=entries)
        self.store.insert(ANSWER_KEYS, key.to_document())
        logger.info("Answer key %s saved for assessment %s", key.id, assessment_id)
        return key

    def latest_answer_key(self, assessment_id):
        docs = self.store.find(ANSWER_KEYS, where={"assessment_id": assessment_id},
                               order_by="created_at", desc=True, limit=1)
        return AnswerKey.from_document(docs[0]) if docs else None

    def authoritative_key(self, assessment_id):
        key = self.latest_answer_key(assessment_id)
        return key.answers if key else None

    def key_history(self, assessment_id):
        docs = self.store.find(ANSWER_KEYS, where={"assessment_id": assessment_id},
                               order_by="created_at", desc=True)
        return [AnswerKey.from_document(d) for d in docs]

    def clear_all(self):
        keys = self.store.delete_all(ANSWER_KEYS)
        assessments = self.store.delete_all(ASSESSMENTS)
        return {"assessments": assessments, "answer_keys": keys}

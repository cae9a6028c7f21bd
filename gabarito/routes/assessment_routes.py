"""
Assessment API routes for Gabarito.
Handles assessments, answer keys, authenticated submissions and the
combined dashboard payload.
"""
import logging
from flask import Blueprint, request, jsonify, g

from ..auth import get_services, teacher_required
from ..errors import AssessmentNotFound
from ..models import (
    AnswerKeyRequest, CreateAssessmentRequest, FromBankRequest, Role,
    StudentAnswersRequest, collapse_whitespace, parse,
)

assessment_bp = Blueprint('assessment', __name__)
logger = logging.getLogger(__name__)


def _is_teacher():
    return g.identity.role == Role.TEACHER


@assessment_bp.route('/all-data', methods=['GET'])
def all_data():
    """
    Latest assessment with its key and submissions.
    Teachers get everything; everyone else gets the assessment shape and
    only their own submissions, never the key.
    """
    services = get_services()
    assessment = services.catalog.latest_assessment()
    if assessment is None:
        return jsonify({"assessment": None, "answerKey": None, "studentAnswers": []})

    submissions = services.submissions.list_by_assessment(assessment.id)
    if _is_teacher():
        key = services.catalog.latest_answer_key(assessment.id)
        return jsonify({
            "assessment": assessment.to_json(),
            "answerKey": key.to_json() if key else None,
            "studentAnswers": [s.to_json() for s in submissions],
        })

    own = [s for s in submissions if s.identity_id == g.identity.id]
    return jsonify({
        "assessment": assessment.to_json(),
        "answerKey": None,
        "studentAnswers": [s.to_json() for s in own],
    })


@assessment_bp.route('/assessments', methods=['GET'])
def list_assessments():
    assessments = get_services().catalog.list_assessments()
    return jsonify({"assessments": [a.to_json() for a in assessments]})


@assessment_bp.route('/assessments', methods=['POST'])
@teacher_required
def create_assessment():
    data = parse(CreateAssessmentRequest, request.get_json(silent=True))
    assessment = get_services().catalog.create_assessment(
        data.name, data.question_count, data.questions, created_by=g.identity.id)
    return jsonify({"assessment": assessment.to_json()}), 201


@assessment_bp.route('/assessments/from-bank', methods=['POST'])
@teacher_required
def create_assessment_from_bank():
    data = parse(FromBankRequest, request.get_json(silent=True))
    assessment, key = get_services().catalog.create_assessment_from_bank(
        data.name, data.question_ids, created_by=g.identity.id)
    return jsonify({"assessment": assessment.to_json(), "answerKey": key.to_json()}), 201


@assessment_bp.route('/assessments/<assessment_id>/submissions', methods=['GET'])
@teacher_required
def list_submissions(assessment_id):
    services = get_services()
    assessment = services.catalog.require_assessment(assessment_id)
    submissions = services.submissions.list_by_assessment(assessment.id)
    return jsonify({
        "assessment": assessment.to_json(),
        "studentAnswers": [s.to_json() for s in submissions],
        "total": len(submissions),
    })


@assessment_bp.route('/answer-keys', methods=['POST'])
@teacher_required
def save_answer_key():
    """Append a new answer key. The newest key is the one used for grading."""
    data = parse(AnswerKeyRequest, request.get_json(silent=True))
    key = get_services().catalog.save_answer_key(data.assessment_id, data.answers)
    return jsonify({"answerKey": key.to_json()}), 201


@assessment_bp.route('/student-answers', methods=['POST'])
def submit_student_answers():
    """
    Grade and store a submission from a signed-in caller.
    Without an assessmentId the latest assessment is used.
    """
    data = parse(StudentAnswersRequest, request.get_json(silent=True))
    services = get_services()

    assessment_id = data.assessment_id
    if not assessment_id:
        latest = services.catalog.latest_assessment()
        if latest is None:
            raise AssessmentNotFound()
        assessment_id = latest.id

    submission = services.submissions.submit(
        assessment_id,
        collapse_whitespace(data.student_name) or g.identity.name,
        data.answers,
        identity_id=g.identity.id,
    )
    return jsonify({"studentAnswer": submission.to_json()}), 201


@assessment_bp.route('/clear-data', methods=['DELETE'])
@teacher_required
def clear_data():
    """Wipe assessments, keys, submissions and links. Accounts and the bank stay."""
    services = get_services()
    removed = {
        "studentAnswers": services.submissions.clear_all(),
        "forms": services.distribution.clear_all(),
    }
    cleared = services.catalog.clear_all()
    removed["assessments"] = cleared["assessments"]
    removed["answerKeys"] = cleared["answer_keys"]
    logger.warning("All assessment data cleared by %s", g.identity.email)
    return jsonify({"status": "cleared", "removed": removed})

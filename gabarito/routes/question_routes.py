"""
Question bank routes for Gabarito.
Search is public; importing ADAPT records is for teachers.
"""
from flask import Blueprint, request, jsonify

from ..auth import get_services, teacher_required
from ..models import ImportRequest, parse

question_bp = Blueprint('question', __name__)

SEARCH_FILTERS = ('q', 'subject', 'difficulty', 'exam', 'year', 'tag')


@question_bp.route('/questions', methods=['GET'])
def search_questions():
    filters = {name: request.args.get(name) for name in SEARCH_FILTERS if request.args.get(name)}
    result = get_services().question_bank.search(
        filters,
        page=request.args.get('page', 1),
        limit=request.args.get('limit', 20),
    )
    result["items"] = [q.to_json() for q in result["items"]]
    return jsonify(result)


@question_bp.route('/questions/import/adapt', methods=['POST'])
@teacher_required
def import_adapt():
    """Bulk import ADAPT interchange items: {"items": [...]} or a bare list."""
    body = request.get_json(silent=True)
    if isinstance(body, list):
        body = {"items": body}
    data = parse(ImportRequest, body)
    return jsonify(get_services().question_bank.bulk_import(data.items))

"""
Question bank: searchable multiple-choice questions with bulk import from
ADAPT-style OER interchange records.

The assessment catalog only reads ``id``, ``correct_answer`` and ``subject``
from bank records.
"""
import html
import logging
import re

from ..errors import InvalidInput
from ..models import LETTERS, Question, collapse_whitespace, normalize_letter

logger = logging.getLogger(__name__)

TABLE = "questions"
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

TAG_RE = re.compile(r"<[^>]+>")


def strip_html(value):
    """Drop tags, unescape entities and collapse whitespace."""
    if value is None:
        return ""
    text = TAG_RE.sub(" ", str(value))
    return collapse_whitespace(html.unescape(text))


def _first(item, *names, default=None):
    for name in names:
        value = item.get(name)
        if value not in (None, ""):
            return value
    return default


def _options(raw):
    """Options as {letter: text}; lists are lettered in order."""
    if isinstance(raw, dict):
        return {str(k).strip().upper(): strip_html(v) for k, v in raw.items()
                if str(k).strip().upper() in LETTERS}
    if isinstance(raw, (list, tuple)):
        options = {}
        for letter, value in zip(LETTERS, raw):
            if isinstance(value, dict):
                value = _first(value, "text", "label", "value", default="")
            options[letter] = strip_html(value)
        return options
    return {}


def _correct(raw):
    if isinstance(raw, int) and not isinstance(raw, bool):
        return LETTERS[raw] if 0 <= raw < len(LETTERS) else ""
    return normalize_letter(raw)


def _year(raw):
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


def _tags(raw):
    if isinstance(raw, str):
        raw = raw.split(",")
    return [strip_html(t) for t in (raw or []) if strip_html(t)]


def normalize_adapt_item(item):
    """
    Convert one ADAPT interchange record into a Question.
    Returns None when the record cannot be used (no statement or no valid answer).
    """
    if not isinstance(item, dict):
        return None
    statement = strip_html(_first(item, "statement", "question", "stem", "body"))
    correct = _correct(_first(item, "correctAnswer", "correct_answer", "answer"))
    if not statement or not correct:
        return None
    return Question(
        statement=statement,
        options=_options(_first(item, "options", "choices", "alternatives", default={})),
        correct_answer=correct,
        subject=strip_html(_first(item, "subject", "topic", default="")),
        difficulty=strip_html(_first(item, "difficulty", default="")),
        exam=strip_html(_first(item, "exam", "source", default="")),
        year=_year(item.get("year")),
        tags=_tags(item.get("tags")),
        license=strip_html(_first(item, "license", default="")),
        source_url=str(_first(item, "sourceUrl", "source_url", "url", default="")).strip(),
        attribution=strip_html(_first(item, "attribution", "author", default="")),
    )


class QuestionBank:
    def __init__(self, store):
        self.store = store

    def search(self, filters=None, page=1, limit=DEFAULT_LIMIT):
        filters = filters or {}
        try:
            page = max(int(page or 1), 1)
            limit = min(max(int(limit or DEFAULT_LIMIT), 1), MAX_LIMIT)
        except (TypeError, ValueError):
            raise InvalidInput("page and limit must be integers")

        where = {}
        for field in ("subject", "difficulty", "exam"):
            if filters.get(field):
                where[field] = filters[field]
        if filters.get("year"):
            year = _year(filters["year"])
            if year is None:
                raise InvalidInput("year must be an integer")
            where["year"] = year
        search = {"statement": filters["q"]} if filters.get("q") else None
        contains = {"tags": filters["tag"]} if filters.get("tag") else None

        total = self.store.count(TABLE, where=where, search=search, contains=contains)
        docs = self.store.find(TABLE, where=where, search=search, contains=contains,
                               order_by="created_at", desc=True,
                               limit=limit, offset=(page - 1) * limit)
        return {
            "items": [Question.from_document(d) for d in docs],
            "total": total,
            "page": page,
            "limit": limit,
        }

    def bulk_import(self, items):
        """Insert usable records, skipping invalid ones and statements already present."""
        questions = []
        skipped = 0
        seen = set()
        for item in items or []:
            question = normalize_adapt_item(item)
            if question is None or question.statement in seen:
                skipped += 1
                continue
            seen.add(question.statement)
            questions.append(question)

        if questions:
            existing = {d["statement"] for d in self.store.find(
                TABLE, where={"statement": [q.statement for q in questions]})}
            fresh = [q for q in questions if q.statement not in existing]
            skipped += len(questions) - len(fresh)
            questions = fresh

        self.store.insert_many(TABLE, [q.to_document() for q in questions])
        logger.info("Question import: %d inserted, %d skipped", len(questions), skipped)
        return {"inserted": len(questions), "skipped": skipped}

    def get_many(self, question_ids):
        if not question_ids:
            return {}
        docs = self.store.find(TABLE, where={"id": list(question_ids)})
        return {d["id"]: Question.from_document(d) for d in docs}

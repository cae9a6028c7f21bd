"""
Public Form Routes for Gabarito.
Teachers mint distribution links; anyone holding a link opens a fill-in form
and submits answers without an account. The public pages answer in plain
HTML and never show internal error details.
"""
import logging
from flask import Blueprint, request, jsonify, url_for
from markupsafe import escape

from ..auth import get_services, teacher_required
from ..errors import AppError
from ..models import CreateLinkRequest, parse

form_bp = Blueprint('form', __name__)
logger = logging.getLogger(__name__)

PAGE_STYLE = (
    "max-width:640px;margin:48px auto;font-family:-apple-system,BlinkMacSystemFont,"
    "'Segoe UI',Roboto,sans-serif;color:#1f2937"
)


# ============ Teacher Endpoints ============

@form_bp.route('/forms', methods=['POST'])
@teacher_required
def create_form():
    """Mint a public link for an assessment."""
    data = parse(CreateLinkRequest, request.get_json(silent=True))
    created = get_services().distribution.create_link(
        data.assessment_id,
        title=data.title,
        description=data.description,
        require_name=data.require_name,
        host_url=request.host_url,
    )
    link = created["link"]
    return jsonify({
        "token": created["token"],
        "url": created["url"],
        "form": link.to_json(),
    }), 201


# ============ Public Endpoints ============

@form_bp.route('/form/<token>', methods=['GET'])
def show_form(token):
    """Render the fill-in form for a link. PUBLIC endpoint."""
    try:
        form = get_services().distribution.render_form(token)
    except AppError as e:
        return _message_page(e.message, status=e.status_code)
    except Exception:
        logger.exception("Failed to render form %s", token)
        return _message_page("Something went wrong. Try again later.", status=500)
    return _form_page(form)


@form_bp.route('/form/<token>/submit', methods=['POST'])
def submit_form(token):
    """Grade and store an anonymous submission. PUBLIC endpoint."""
    fields = request.get_json(silent=True) if request.is_json else request.form
    try:
        result = get_services().distribution.submit_form(token, fields)
    except AppError as e:
        message = e.message
        missing = e.details.get("missing") if isinstance(e.details, dict) else None
        if missing:
            message += " (questions " + ", ".join(str(n) for n in missing) + ")"
        return _message_page(message, status=e.status_code)
    except Exception:
        logger.exception("Failed to submit form %s", token)
        return _message_page("Something went wrong. Try again later.", status=500)

    submission = result["submission"]
    return _message_page(
        "Thank you, " + submission.student_name + "! Your answers were received.",
        success=True,
        title=result["link"].title,
    )


# ============ Pages ============

def _page(title, body, status=200):
    return (
        '<!doctype html><html><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1">'
        '<title>' + str(escape(title)) + '</title></head>'
        '<body><div style="' + PAGE_STYLE + '">' + body + '</div></body></html>'
    ), status, {"Content-Type": "text/html; charset=utf-8"}


def _message_page(message, success=False, title="Gabarito", status=200):
    """Return a simple page for a confirmation or a failure."""
    color = "#16a34a" if success else "#dc2626"
    icon = "&#10003;" if success else "&#10007;"
    body = (
        '<div style="text-align:center;padding:40px 32px;border-radius:16px;background:#f9fafb">'
        '<h1 style="font-size:1.5rem;margin:0 0 16px">' + str(escape(title)) + '</h1>'
        '<div style="font-size:3rem;color:' + color + ';margin:0 0 16px">' + icon + '</div>'
        '<p style="font-size:1.1rem;margin:0">' + str(escape(message)) + '</p>'
        '</div>'
    )
    return _page(title, body, status)


def _form_page(form):
    action = url_for('form.submit_form', token=form["token"])
    parts = [
        '<h1 style="font-size:1.5rem">' + str(escape(form["title"])) + '</h1>',
    ]
    if form["description"]:
        parts.append('<p>' + str(escape(form["description"])) + '</p>')
    parts.append('<form method="post" action="' + str(escape(action)) + '">')
    if form["requireName"]:
        parts.append(
            '<p><label>Name <input type="text" name="student_name" required '
            'style="width:100%;padding:8px"></label></p>'
        )
    for question in form["questions"]:
        legend = "Question " + str(question["number"])
        if question["subject"]:
            legend += " - " + question["subject"]
        parts.append('<fieldset style="margin:0 0 12px;border-radius:8px">')
        parts.append('<legend>' + str(escape(legend)) + '</legend>')
        for choice in question["choices"]:
            parts.append(
                '<label style="margin-right:16px"><input type="radio" required name="'
                + question["field"] + '" value="' + choice + '"> ' + choice + '</label>'
            )
        parts.append('</fieldset>')
    parts.append('<button type="submit" style="padding:10px 28px">Submit</button></form>')
    return _page(form["title"], "".join(parts))

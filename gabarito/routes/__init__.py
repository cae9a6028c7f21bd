"""
Gabarito API Routes
===================

All route blueprints for the Gabarito application.

Usage:
    from gabarito.routes import register_routes
    register_routes(app)
"""
from .auth_routes import auth_bp
from .assessment_routes import assessment_bp
from .form_routes import form_bp
from .question_routes import question_bp


def register_routes(app):
    """Register all route blueprints with the Flask app."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(assessment_bp)
    app.register_blueprint(form_bp)
    app.register_blueprint(question_bp)


__all__ = [
    'register_routes',
    'auth_bp',
    'assessment_bp',
    'form_bp',
    'question_bp',
]

#!/usr/bin/env python3
"""
Gabarito - Assessments, Answer Keys and Grading
===============================================
Run: python3 -m gabarito.app
Then open: http://localhost:5000/health
"""
import logging

from flask import Flask, jsonify
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from .auth import init_auth
from .config import Config
from .errors import AppError
from .rate_limit import RateLimiter
from .routes import register_routes
from .services import (
    AccountService, CatalogService, DistributionService, IdentityStore,
    QuestionBank, SubmissionService,
)
from .storage import create_store

logger = logging.getLogger(__name__)

bcrypt = Bcrypt()


class Services:
    """Per-app wiring of the document store into the services."""

    def __init__(self, store, cfg):
        self.store = store
        self.identities = IdentityStore(store)
        self.accounts = AccountService(
            self.identities,
            bcrypt,
            cfg.jwt_secret,
            session_ttl_days=cfg.session_ttl_days,
            bcrypt_rounds=cfg.bcrypt_log_rounds,
        )
        self.question_bank = QuestionBank(store)
        self.catalog = CatalogService(store, self.question_bank)
        self.submissions = SubmissionService(store, self.catalog)
        self.distribution = DistributionService(
            store,
            self.catalog,
            self.submissions,
            token_bytes=cfg.link_token_bytes,
            public_base_url=cfg.public_base_url,
        )


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        code = (e.name or "error").upper().replace(" ", "_")
        return jsonify({"error": e.description, "code": code}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify({"error": "Internal server error", "code": "INTERNAL_ERROR"}), 500


def create_app(overrides=None, store=None, rate_limiter=None):
    """
    Build the Flask app.

    Args:
        overrides: dict of Config attributes to replace (e.g. {"storage_backend": "memory"})
        store: document store to use instead of the configured backend
        rate_limiter: limiter for the auth endpoints
    """
    cfg = Config().update(overrides or {})
    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config['SECRET_KEY'] = cfg.secret_key
    app.config['BCRYPT_LOG_ROUNDS'] = cfg.bcrypt_log_rounds
    app.config['GABARITO'] = cfg

    if cfg.trusted_proxy_hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=int(cfg.trusted_proxy_hops))

    origins = cfg.cors_origins
    if origins != "*":
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    CORS(app, origins=origins)
    bcrypt.init_app(app)

    app.extensions['gabarito'] = Services(store if store is not None else create_store(cfg), cfg)
    app.extensions['rate_limiter'] = rate_limiter or RateLimiter(
        cfg.auth_rate_limit, cfg.auth_rate_window_seconds)

    # Auth hook goes in before the blueprints
    init_auth(app)
    register_routes(app)
    register_error_handlers(app)

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    return app


def main():
    from .config import HOST, PORT, DEBUG

    app = create_app()
    print()
    print("+" + "=" * 50 + "+")
    print("|  Gabarito - Assessments and Grading              |")
    print("+" + "=" * 50 + "+")
    print(f"|  Listening on http://{HOST}:{PORT}".ljust(51) + "|")
    print("|  Press Ctrl+C to stop                            |")
    print("+" + "=" * 50 + "+")
    print()
    app.run(host=HOST, port=PORT, debug=DEBUG)


if __name__ == '__main__':
    main()

"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from typing import Optional

import click
from flask import Flask, jsonify, current_app
from werkzeug.exceptions import HTTPException

from wisenest_i18n.ai.service import AIService
from wisenest_i18n.config import CONFIG_FILE, TranslationConfig, create_default_config, load_config
from wisenest_i18n.core.database import TranslationStore
from wisenest_i18n.core.schema import initialize_database
from wisenest_i18n.i18n import initialize_ui_translations
from wisenest_i18n.integrations.line import LineCapability, select_line_capability
from wisenest_i18n.logger import get_logger, set_log_mode
from wisenest_i18n.translation.manager import TranslationManager
from wisenest_i18n.translation.validator import FormValidationError, summarize_errors
from wisenest_i18n.web.auth import SessionVerifier, TokenSessionVerifier

from .routes import translation_bp, admin_bp, line_bp

logger = get_logger(__name__)

EXTENSION_NAME = "wisenest_i18n"


def build_app(
    config: TranslationConfig,
    store: TranslationStore,
    ai_service: AIService,
    session_verifier: Optional[SessionVerifier] = None,
    line: Optional[LineCapability] = None,
) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False

    manager = TranslationManager(ai_service, store, config)
    app.extensions[EXTENSION_NAME] = {
        "config": config,
        "store": store,
        "ai_service": ai_service,
        "manager": manager,
        "session_verifier": session_verifier or TokenSessionVerifier(config.admin_token),
        "line": line or select_line_capability(config),
    }

    register_blueprints(app)
    register_default_routes(app)
    register_error_handlers(app)
    register_commands(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translation_bp, url_prefix="/api/i18n")
    app.register_blueprint(admin_bp, url_prefix="/admin/api/i18n")
    app.register_blueprint(line_bp, url_prefix="/api/line")


def register_default_routes(app: Flask) -> None:
    """Register default health routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})


def register_error_handlers(app: Flask) -> None:
    """Every error leaves the API as JSON."""

    @app.errorhandler(FormValidationError)
    def validation_failed(e: FormValidationError):
        return jsonify(summarize_errors(e.errors)), 400

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"code": f"H{e.code}", "message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def internal_error(e: Exception):
        logger.exception("Internal server error: %s", e)
        return jsonify({"code": "H500", "message": "Internal server error"}), 500


def register_commands(app: Flask) -> None:
    """Register Flask CLI commands."""

    @app.cli.command("init-translations")
    @click.option("--machine-translate/--no-machine-translate", default=True,
                  help="Machine translate Thai labels missing from the bundled pack.")
    def init_translations_command(machine_translate: bool):
        """Re-seed the base UI dictionary for both languages."""
        services = current_app.extensions[EXTENSION_NAME]
        use_manager = machine_translate and services["config"].has_credentials
        result = initialize_ui_translations(services["store"], services["manager"] if use_manager else None)
        click.echo(
            f"Seeded {result['count']} UI translations "
            f"({result['machine_translated']} machine translated, {result['needs_review']} need review)"
        )

    @app.cli.command("init-config")
    @click.option("--force", is_flag=True, help="Overwrite an existing config file.")
    def init_config_command(force: bool):
        """Write config/config.json with the default settings."""
        if CONFIG_FILE.exists() and not force:
            click.echo(f"Config file already exists: {CONFIG_FILE}")
            return
        create_default_config()
        click.echo(f"Created {CONFIG_FILE}")


def create_app(
    config: Optional[TranslationConfig] = None,
    store: Optional[TranslationStore] = None,
    ai_service: Optional[AIService] = None,
    session_verifier: Optional[SessionVerifier] = None,
    line: Optional[LineCapability] = None,
) -> Flask:
    """Application factory; every collaborator can be injected."""
    set_log_mode()
    config = config or load_config()
    if store is None:
        store = TranslationStore(config.db_file)
    initialize_database(store)
    ai_service = ai_service or AIService(config)
    return build_app(config, store, ai_service, session_verifier, line)

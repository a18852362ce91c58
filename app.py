from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from config import Config
from routes import health_bp, booking_bp, admin_bp, audit_bp, profile_bp, cron_bp

from models import db
from flask_migrate import Migrate
from services.errors import ServiceError
from utils.auth_context import load_current_actor


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(cron_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_actor():
        load_current_actor()

    @app.errorhandler(ServiceError)
    def _service_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(SQLAlchemyError)
    def _storage_error(err):
        db.session.rollback()
        app.logger.exception("Storage failure: %s", err)
        return jsonify(success=False, error="InternalError", message="Internal error, try again later"), 500

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
import click
from models.user import Profile
from services import profiles, summaries
from utils.roles import ALL_ROLES

def register_cli(app):
    @app.cli.command("set-role")
    @click.argument("actor_id")
    @click.argument("role", type=click.Choice(ALL_ROLES, case_sensitive=False))
    def set_role(actor_id, role):
        """Assign a role to a registered profile (bootstrap)."""
        profile = db.session.get(Profile, actor_id)
        if not profile:
            click.echo("Profile not found")
            return

        demoted = profiles.assign_role(profile, role.upper())
        db.session.commit()

        click.echo(f"{profile.id} is now {profile.role}")
        for other in demoted:
            click.echo(f"{other} demoted to MEMBER")

    @app.cli.command("weekly-report")
    @click.argument("window", type=click.Choice(["future", "past"]))
    def weekly_report(window):
        """Run a weekly summary; meant to be called by an external scheduler."""
        if window == "future":
            result = summaries.future_week_summary()
        else:
            result = summaries.past_week_closure()
        click.echo(
            f"{result['count']} bookings, {result['notified']} admins notified, {result['emailed']} emails sent"
        )

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)

from flask import Blueprint, Flask, g, jsonify, request, current_app

from ...errors import LifecycleError
from ...modules.items.routes import bp as items_bp
from ...modules.claims.routes import bp as claims_bp
from ...modules.sellers.routes import bp as sellers_bp
from ...modules.profiles.routes import bp as profiles_bp
from ...modules.admin.routes import bp as admin_bp
from ...modules.notifications.routes import bp as notifications_bp
from ...security import Actor, verify_token


def _handle_lifecycle_error(err: LifecycleError):
    if err.status_code >= 500:  # pragma: no cover - none defined today
        current_app.logger.error("Lifecycle failure: %s", err.message)
    return jsonify(err.to_dict()), err.status_code


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Request-scoped identity. Production accepts only a signed bearer token.
    # In development (DEBUG=True) the `X-User-Id` / `X-User-Roles` headers are
    # also accepted to simplify local testing.
    @api_v1.before_request  # type: ignore
    def _load_actor():
        uid: str | None = None
        roles: list = []
        debug_mode = bool(current_app.config.get("DEBUG"))

        # Bearer token takes precedence
        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            token = auth[7:].strip()
            uid, roles = verify_token(
                token,
                max_age=int(current_app.config.get("AUTH_TOKEN_MAX_AGE")),
                secret=current_app.config.get("SECRET_KEY"),
            )
            if uid is None:
                current_app.logger.info("Rejected bearer token for %s %s", request.method, request.path)
        elif debug_mode:
            raw = (request.headers.get("X-User-Id") or "").strip()
            if raw:
                uid = raw
                roles = [r for r in (request.headers.get("X-User-Roles") or "").split(",") if r.strip()]
        g.actor = Actor.of(uid, roles) if uid else None  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(profiles_bp)
    api_v1.register_blueprint(items_bp)
    api_v1.register_blueprint(claims_bp)
    api_v1.register_blueprint(sellers_bp)
    api_v1.register_blueprint(admin_bp)
    api_v1.register_blueprint(notifications_bp)

    app.register_blueprint(api_v1)
    app.register_error_handler(LifecycleError, _handle_lifecycle_error)

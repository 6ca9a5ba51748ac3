from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
import os

db = SQLAlchemy()
migrate = Migrate()

LOCAL_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def cors_origins() -> list[str]:
	"""CORS_ALLOW_ORIGINS (comma-separated), else the local web app outside production."""
	configured = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o.strip()]
	if configured or os.getenv("FLASK_ENV", "development").lower() == "production":
		return configured
	return list(LOCAL_ORIGINS)


# Bearer tokens plus the debug identity headers
cors = CORS(resources={
	r"/api/*": {
		"origins": cors_origins(),
		"allow_headers": ["Authorization", "Content-Type", "X-User-Id", "X-User-Roles"],
	},
})

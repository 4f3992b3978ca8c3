# decorops/app.py
from __future__ import annotations
import logging
from flask import Flask
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from .config import config
from .db import init_db, SessionLocal
from .routes.api import api

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = Flask(__name__)
app.config.update(
    SECRET_KEY=config.SECRET_KEY,
    ENV=config.ENV,
    DEBUG=config.DEBUG,
    RATELIMIT_ENABLED=config.RATELIMIT_ENABLED,
    RATELIMIT_STORAGE_URI=config.RATELIMIT_STORAGE_URI,
)

# Init DB (bootstrap for first run)
init_db()

# Rate limiter: use the limiter object defined in the api module and bind it here
from .routes import api as api_mod  # noqa: E402
api_mod.limiter.init_app(app)

# CORS (optional)
if config.ENABLE_CORS:
    CORS(app, resources={r"/api/*": {"origins": config.CORS_ORIGINS}})

# Blueprints
app.register_blueprint(api)

@app.teardown_appcontext
def _remove_session(_exc=None):
    SessionLocal.remove()

# Health
@app.get("/healthz")
def healthz():
    return {"ok": True}

@app.get("/readyz")
def readyz():
    try:
        with SessionLocal() as s:
            s.execute(text("SELECT 1"))
    except OperationalError:
        logging.getLogger(__name__).error("readiness check: database unreachable")
        return {"ok": False}, 503
    return {"ok": True}

"""
CORS for the dashboard frontend.
Origins come from settings.cors_origins (Vite dev server + localhost:3000 by default).
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.api.config import Settings, settings as default_settings

ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
EXPOSED_HEADERS = ["X-Request-ID", "Content-Disposition"]


def setup_cors(app: FastAPI, config: Settings | None = None) -> None:
    config = config or default_settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=False,
        allow_methods=ALLOWED_METHODS,
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=EXPOSED_HEADERS,
        max_age=600,
    )

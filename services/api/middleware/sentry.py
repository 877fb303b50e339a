"""
Optional Sentry instrumentation. Disabled when SENTRY_DSN is empty.

Report text is user-generated content scraped from Reddit, so request
bodies (ingest payloads, import documents) are dropped before sending.
"""

from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from services.api.config import Settings, settings as default_settings

BODY_ROUTES = ("/reports/ingest", "/reports/import", "/classify")


def _drop_request_bodies(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """before_send hook: remove request bodies for routes that carry report text."""
    request = event.get("request")
    if isinstance(request, dict):
        url = request.get("url") or ""
        if any(route in url for route in BODY_ROUTES):
            request.pop("data", None)
    return event


def setup_sentry(config: Settings | None = None) -> bool:
    """Initialise Sentry. Returns False when no DSN is configured."""
    config = config or default_settings
    if not config.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=config.sentry_dsn,
        environment=config.environment,
        release=f"{config.app_name}@{config.app_version}",
        traces_sample_rate=config.sentry_traces_sample_rate,
        before_send=_drop_request_bodies,
        integrations=[
            StarletteIntegration(transaction_style="endpoint"),
            FastApiIntegration(transaction_style="endpoint"),
        ],
        send_default_pii=False,
    )
    return True

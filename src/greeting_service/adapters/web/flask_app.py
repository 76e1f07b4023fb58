"""Flask adapter exposing the greeting and the administrative refresh endpoint.

Routes
------
``GET /hello``
    Plain-text greeting, e.g. ``Hello World!``.
``POST /actuator/refresh``
    Re-resolve configuration; answers the JSON list of changed keys, or ``500``
    with ``{"error": ...}`` when the new configuration cannot be loaded (the
    previous greeting stays in effect). Only registered when a refresher is
    supplied.
``GET /actuator/health``
    ``{"status": "UP"}``.
"""

from __future__ import annotations

import flask

from ...application.greeting import GreetingHandler
from ...application.refresh import ConfigRefresher
from ...domain.errors import ConfigError


def create_app(handler: GreetingHandler, refresher: ConfigRefresher | None = None) -> flask.Flask:
    """Build a Flask application bound to *handler* (and optionally *refresher*)."""

    app = flask.Flask("greeting_service")

    @app.get("/hello")
    def hello() -> flask.Response:
        return flask.Response(handler.hello(), mimetype="text/plain")

    @app.get("/actuator/health")
    def health() -> flask.Response:
        return flask.jsonify(status="UP")

    if refresher is not None:

        @app.post("/actuator/refresh")
        def refresh() -> tuple[flask.Response, int]:
            try:
                changed = refresher.refresh()
            except ConfigError as exc:
                return flask.jsonify(error=str(exc)), 500
            return flask.jsonify(list(changed)), 200

    return app

"""Companion Flask server: static form page plus a JSON-file submit handler."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from flask import Flask, request, send_from_directory

from . import config
from .submissions_file import append_submission


def create_app(submissions_path: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    app.config["SUBMISSIONS_FILE"] = Path(submissions_path or config.SUBMISSIONS_FILE)

    @app.route("/", methods=["GET"])
    def form_page():
        return send_from_directory(config.VIEWS_DIR, "form.html")

    @app.route("/submit", methods=["POST"])
    def submit():
        entry = {
            "name": request.form.get("name", ""),
            "email": request.form.get("email", ""),
            "message": request.form.get("message", ""),
            "submittedAt": datetime.now().strftime(config.SUBMITTED_AT_FORMAT),
        }
        path = app.config["SUBMISSIONS_FILE"]
        submissions = append_submission(path, entry)
        app.logger.info("saved submission %d to %s", len(submissions), path)
        return config.ACK_PAGE

    return app

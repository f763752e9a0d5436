"""Administrator API: token exchange and participant export."""

from __future__ import annotations

import io
import logging

from flask import Blueprint, current_app, jsonify, request, send_file

from conference_site.errors import ConferenceError
from conference_site.extensions import get_services, limiter
from conference_site.middleware.admin_auth import admin_required, check_admin_secret, issue_admin_token

admin_bp = Blueprint("admin", __name__)
logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("conference_site.audit.admin")


@admin_bp.route("/token", methods=["POST"])
@limiter.limit("10 per hour")
def admin_token():
    """Exchange the administrator secret for an access token."""
    data = request.get_json(silent=True) or {}
    if not check_admin_secret(data.get("secret"), current_app.config.get("ADMIN_SECRET_HASH")):
        logger.warning("Rejected admin token request from %s", request.remote_addr)
        return jsonify({"error": "invalid_credentials"}), 401
    return jsonify({"access_token": issue_admin_token()}), 200


@admin_bp.route("/participants/export", methods=["GET"])
@admin_required
def export_participants():
    """Download every registered participant as ``?format=csv`` or ``?format=xlsx`` (default)."""
    fmt = request.args.get("format", "xlsx")
    try:
        export = get_services(current_app)["export"].export_all(fmt)
    except ConferenceError as error:
        return jsonify({"error": error.code, "message": error.message}), error.status
    except Exception:
        logger.exception("Unexpected error exporting participants")
        return jsonify({"error": "internal_server_error"}), 500

    audit_logger.info("Participants exported", extra={"format": fmt, "file": export.filename})
    return send_file(
        io.BytesIO(export.content),
        mimetype=export.mimetype,
        as_attachment=True,
        download_name=export.filename,
    )

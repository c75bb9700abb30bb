from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, current_role, domain_error_response
from ..container import Container
from ..core.exceptions import DomainError
from .model import NotificationConfig


def _config_payload(config: NotificationConfig) -> dict:
    return {"success": True, "config": config.to_dict()}


def register(app: Flask, container: Container) -> None:
    run = container.runner.run
    service = container.notification_settings_service

    @app.route("/api/admin/notifications/settings", methods=["GET", "PATCH"], endpoint="api_notification_settings")
    @admin_required
    def api_notification_settings():
        try:
            if request.method == "GET":
                config = run(service.get_config())
            else:
                changes = request.get_json(silent=True) or {}
                config = run(service.update_config(current_role=current_role(), changes=changes))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(_config_payload(config)), 200

    @app.route("/api/admin/notifications/toggle", methods=["POST"], endpoint="api_notification_toggle")
    @admin_required
    def api_notification_toggle():
        try:
            config = run(service.toggle_enabled(current_role=current_role()))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify(_config_payload(config)), 200

    @app.route("/api/admin/notifications/status", methods=["GET"], endpoint="api_notification_status")
    @admin_required
    def api_notification_status():
        scheduler = container.scheduler
        last = scheduler.last_notification_time
        return jsonify(
            {
                "success": True,
                "state": scheduler.state.value,
                "last_notification_time": last.isoformat() if last else None,
            }
        ), 200

    @app.route("/api/admin/notifications/history", methods=["GET", "DELETE"], endpoint="api_notification_history")
    @admin_required
    def api_notification_history():
        if request.method == "DELETE":
            run(service.clear_history())
            return jsonify({"success": True, "items": []}), 200
        return jsonify({"success": True, "items": [i.to_dict() for i in run(service.history())]}), 200

    @app.route(
        "/api/admin/notifications/history/<notification_id>",
        methods=["DELETE"],
        endpoint="api_notification_history_item",
    )
    @admin_required
    def api_notification_history_item(notification_id: str):
        try:
            run(service.delete_history_item(notification_id))
        except DomainError as e:
            return domain_error_response(e)
        return jsonify({"success": True}), 200

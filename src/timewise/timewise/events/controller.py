from __future__ import annotations

from typing import Any

from flask import Flask, g, jsonify, request

from ..auth.context import login_required
from ..common.datetime_utils import parse_iso_datetime
from ..common.results import OperationResult
from ..core.enums import EventType, ResultCode
from ..container import Container
from .titles import suggest_title

_HTTP_STATUS = {
    ResultCode.OK: 200,
    ResultCode.INVALID: 400,
    ResultCode.FORBIDDEN: 403,
    ResultCode.NOT_FOUND: 404,
    ResultCode.STORE_ERROR: 503,
}


def request_payload() -> dict[str, Any]:
    """JSON body, or the form with repeated ``recipients`` fields kept as a list."""
    if request.is_json:
        body = request.get_json(silent=True)
        return dict(body) if isinstance(body, dict) else {}
    data: dict[str, Any] = request.form.to_dict()
    recipients = request.form.getlist("recipients")
    if len(recipients) > 1:
        data["recipients"] = recipients
    return data


def result_response(result: OperationResult, *, created: bool = False):
    status = _HTTP_STATUS[result.code]
    if created and result.success:
        status = 201
    return jsonify(result.to_dict()), status


def register(app: Flask, container: Container) -> None:
    service = container.event_service

    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @login_required
    async def list_events():
        events = await service.list_events(g.current_user.user_id)
        return jsonify([e.to_dict() for e in events])

    @app.route("/api/events/<event_id>", methods=["GET"], endpoint="get_event")
    @login_required
    async def get_event(event_id: str):
        record = await service.get_event(event_id, g.current_user.user_id)
        if record is None:
            return jsonify({"success": False, "message": "Event not found."}), 404
        return jsonify(record.to_dict())

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    @login_required
    async def create_event():
        result = await service.create_event(request_payload(), current_user=g.current_user)
        return result_response(result, created=True)

    @app.route("/api/events/<event_id>", methods=["PUT"], endpoint="update_event")
    @login_required
    async def update_event(event_id: str):
        payload = request_payload()
        payload["id"] = event_id
        result = await service.update_event(payload, current_user=g.current_user)
        return result_response(result)

    @app.route("/api/events/<event_id>", methods=["DELETE"], endpoint="delete_event")
    @login_required
    async def delete_event(event_id: str):
        result = await service.delete_event(event_id, g.current_user.user_id)
        return result_response(result)

    @app.route("/api/event-types", methods=["GET"], endpoint="event_types")
    async def event_types():
        return jsonify([{"value": et.value, "label": et.label} for et in EventType])

    @app.route("/api/events/title-suggestion", methods=["POST"], endpoint="title_suggestion")
    @login_required
    async def title_suggestion():
        payload = request_payload()
        try:
            event_type = EventType(str(payload.get("eventType") or ""))
            start = parse_iso_datetime(str(payload.get("startDate") or ""))
            end_raw = payload.get("endDate")
            end = parse_iso_datetime(str(end_raw)) if end_raw else None
        except (OverflowError, ValueError):
            return jsonify({"success": False, "message": "eventType and startDate are required"}), 400

        title = suggest_title(g.current_user.name, start, end, event_type, payload.get("additionalText"))
        return jsonify({"title": title})

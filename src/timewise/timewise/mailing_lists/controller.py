from __future__ import annotations

from flask import Flask, jsonify

from ..auth.context import login_required
from ..container import Container
from ..events.controller import request_payload, result_response


def register(app: Flask, container: Container) -> None:
    service = container.mailing_list_service

    @app.route("/api/mailing-lists", methods=["GET"], endpoint="list_mailing_lists")
    @login_required
    async def list_mailing_lists():
        lists = await service.list_mailing_lists()
        return jsonify([ml.to_dict() for ml in lists])

    @app.route("/api/mailing-lists", methods=["POST"], endpoint="add_mailing_list")
    @login_required
    async def add_mailing_list():
        payload = request_payload()
        # Settings form field names are accepted alongside the short ones.
        name = str(payload.get("name") or payload.get("newListName") or "")
        emails = str(payload.get("emails") or payload.get("newListEmails") or "")
        result = await service.add_mailing_list(name, emails)
        return result_response(result, created=True)

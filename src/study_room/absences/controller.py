from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.payload import json_body
from ..api.serializers import absence_json
from ..auth.identity import current_identity, require_identity
from ..common.datetime_utils import parse_iso_date, parse_optional_datetime
from ..common.validators import require_int
from ..core.enums import Role
from ..container import Container
from ..users.service import users_by_id


def register(app: Flask, container: Container) -> None:
    service = container.absence_service

    def requests_json(rows):
        students = users_by_id(container.users_repo, (r.student_id for r in rows))
        return [absence_json(r, student=students.get(r.student_id)) for r in rows]

    @app.route("/api/absence", methods=["POST"], endpoint="create_absence")
    @require_identity(Role.STUDENT)
    def create_absence():
        caller = current_identity()
        body = json_body()
        created = service.submit(
            current_role=caller.role,
            student_id=caller.user_id,
            absence_date=parse_iso_date(body.get("date"), "date"),
            absence_type=body.get("type"),
            reason_text=body.get("reasonText"),
            start_at=parse_optional_datetime(body.get("startAt"), "startAt"),
            end_at=parse_optional_datetime(body.get("endAt"), "endAt"),
            evidence_url=body.get("evidenceUrl"),
        )
        return jsonify({"message": "Absence request submitted", "request": requests_json([created])[0]}), 201

    @app.route("/api/absence", methods=["GET"], endpoint="list_absences")
    @require_identity()
    def list_absences():
        caller = current_identity()
        student_id = request.args.get("studentId")
        rows = service.list_requests(
            caller_id=caller.user_id,
            caller_role=caller.role,
            student_id=require_int(student_id, "studentId") if student_id else None,
            status=request.args.get("status") or None,
        )
        return jsonify({"requests": requests_json(rows)})

    @app.route("/api/absence/<int:request_id>/approve", methods=["POST"], endpoint="approve_absence")
    @require_identity(Role.MENTOR, Role.PARENT)
    def approve_absence(request_id: int):
        caller = current_identity()
        updated = service.approve(
            request_id=request_id,
            acting_user_id=caller.user_id,
            acting_role=caller.role,
            comment=json_body().get("comment"),
        )
        return jsonify({"message": "Absence approved", "request": requests_json([updated])[0]})

    @app.route("/api/absence/<int:request_id>/reject", methods=["POST"], endpoint="reject_absence")
    @require_identity(Role.MENTOR, Role.PARENT)
    def reject_absence(request_id: int):
        caller = current_identity()
        updated = service.reject(
            request_id=request_id,
            acting_user_id=caller.user_id,
            acting_role=caller.role,
            comment=json_body().get("comment"),
        )
        return jsonify({"message": "Absence rejected", "request": requests_json([updated])[0]})

from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.payload import json_body
from ..api.serializers import booking_json, mentor_json
from ..auth.identity import current_identity, require_identity
from ..common.datetime_utils import parse_iso_datetime
from ..core.enums import Role
from ..container import Container
from ..users.service import users_by_id


def register(app: Flask, container: Container) -> None:
    bookings = container.booking_service
    mentors = container.mentor_directory_service

    def bookings_json(rows, *, with_email=True):
        people = users_by_id(container.users_repo, (i for b in rows for i in (b.student_id, b.mentor_id)))
        return [
            booking_json(b, student=people.get(b.student_id), mentor=people.get(b.mentor_id), with_email=with_email)
            for b in rows
        ]

    @app.route("/api/qa/mentors", methods=["GET"], endpoint="list_mentors")
    @require_identity()
    def list_mentors():
        rows = mentors.list_mentors(subject=request.args.get("subject"))
        return jsonify({"mentors": [mentor_json(m) for m in rows]})

    @app.route("/api/qa/book", methods=["POST"], endpoint="book_qa")
    @require_identity(Role.STUDENT)
    def book_qa():
        caller = current_identity()
        body = json_body()
        booking = bookings.book(
            current_role=caller.role,
            student_id=caller.user_id,
            mentor_id=body.get("mentorId"),
            subject=body.get("subject"),
            chapter=body.get("chapter"),
            summary=body.get("summary"),
            images=body.get("images"),
            slot_start=parse_iso_datetime(body.get("slotStart"), "slotStart"),
            slot_end=parse_iso_datetime(body.get("slotEnd"), "slotEnd"),
        )
        return jsonify({"message": "Q&A session booked", "booking": bookings_json([booking])[0]}), 201

    @app.route("/api/qa/<int:booking_id>/accept", methods=["POST"], endpoint="accept_booking")
    @require_identity(Role.MENTOR)
    def accept_booking(booking_id: int):
        booking = bookings.accept(booking_id=booking_id, acting_mentor_id=current_identity().user_id)
        return jsonify({"message": "Booking accepted", "booking": bookings_json([booking])[0]})

    @app.route("/api/qa/<int:booking_id>/start", methods=["POST"], endpoint="start_booking")
    @require_identity(Role.MENTOR)
    def start_booking(booking_id: int):
        booking = bookings.start(booking_id=booking_id, acting_mentor_id=current_identity().user_id)
        return jsonify({"message": "Session started", "booking": bookings_json([booking])[0]})

    @app.route("/api/qa/<int:booking_id>/answer", methods=["POST"], endpoint="answer_booking")
    @require_identity(Role.MENTOR)
    def answer_booking(booking_id: int):
        body = json_body()
        booking = bookings.answer(
            booking_id=booking_id,
            acting_mentor_id=current_identity().user_id,
            answer_text=body.get("answerText"),
            answer_files=body.get("answerFiles"),
        )
        return jsonify({"message": "Answer submitted", "booking": bookings_json([booking])[0]})

    @app.route("/api/qa/<int:booking_id>/cancel", methods=["POST"], endpoint="cancel_booking")
    @require_identity(Role.STUDENT, Role.MENTOR)
    def cancel_booking(booking_id: int):
        caller = current_identity()
        booking = bookings.cancel(booking_id=booking_id, acting_user_id=caller.user_id, acting_role=caller.role)
        return jsonify({"message": "Booking cancelled", "booking": bookings_json([booking])[0]})

    @app.route("/api/qa/history", methods=["GET"], endpoint="qa_history")
    @require_identity()
    def qa_history():
        rows = bookings.history(
            caller_id=current_identity().user_id,
            subject=request.args.get("subject"),
            chapter=request.args.get("chapter"),
        )
        return jsonify({"history": bookings_json(rows, with_email=False)})

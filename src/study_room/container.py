from __future__ import annotations

from dataclasses import dataclass

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.repository import AbsenceRepository
from .absences.service import AbsenceService
from .database.connection import DatabaseConnection, DBConfig
from .qa.mysql_booking_repository import MySQLBookingRepository
from .qa.repository import BookingRepository
from .qa.service import BookingService
from .users.mysql_user_repository import MySQLUserDirectory
from .users.repository import UserDirectory
from .users.service import MentorDirectoryService


@dataclass(frozen=True)
class Container:
    users_repo: UserDirectory
    absences_repo: AbsenceRepository
    bookings_repo: BookingRepository

    mentor_directory_service: MentorDirectoryService
    absence_service: AbsenceService
    booking_service: BookingService


def build_services(
    *,
    users_repo: UserDirectory,
    absences_repo: AbsenceRepository,
    bookings_repo: BookingRepository,
    strict_answer: bool = False,
) -> Container:
    """Wire services on top of any repository implementations."""
    return Container(
        users_repo=users_repo,
        absences_repo=absences_repo,
        bookings_repo=bookings_repo,
        mentor_directory_service=MentorDirectoryService(users_repo),
        absence_service=AbsenceService(absences_repo, users_repo),
        booking_service=BookingService(bookings_repo, users_repo, strict_answer=strict_answer),
    )


def build_container(*, db_config: dict, strict_answer: bool = False) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    return build_services(
        users_repo=MySQLUserDirectory(conn),
        absences_repo=MySQLAbsenceRepository(conn),
        bookings_repo=MySQLBookingRepository(conn),
        strict_answer=strict_answer,
    )

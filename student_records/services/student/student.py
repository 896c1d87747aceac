import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from student_records.core.exceptions import ConflictException, NotFoundException
from student_records.models.student import Student
from student_records.schemas.student import StudentCreate, StudentUpdate

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Email already exists"
NOT_FOUND_MESSAGE = "Student not found"


def get_student(db: Session, student_id: int) -> Student:
    """Get one student by ID, raising NotFoundException if missing"""
    db_student = db.query(Student).filter(Student.id == student_id).first()
    if db_student is None:
        raise NotFoundException(NOT_FOUND_MESSAGE)
    return db_student


def get_students(db: Session) -> List[Student]:
    """All students, newest first"""
    return (
        db.query(Student)
        .order_by(Student.created_at.desc(), Student.id.desc())
        .all()
    )


def _commit(db: Session) -> None:
    """
    Commit the pending write. A unique violation on email comes back
    from the store as IntegrityError; roll back so nothing is persisted.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Rejected write with duplicate email: {e.orig}")
        raise ConflictException(DUPLICATE_EMAIL_MESSAGE) from e


def create_student(db: Session, student: StudentCreate) -> Student:
    db_student = Student(
        name=student.name,
        email=student.email,
        course=student.course
    )
    db.add(db_student)
    _commit(db)
    db.refresh(db_student)
    logger.info(f"Created student {db_student.id}")
    return db_student


def update_student(db: Session, student_id: int, student: StudentUpdate) -> Student:
    """Rewrite name, email and course. id and created_at never change."""
    db_student = get_student(db, student_id)
    db_student.name = student.name
    db_student.email = student.email
    db_student.course = student.course
    _commit(db)
    db.refresh(db_student)
    logger.info(f"Updated student {student_id}")
    return db_student


def delete_student(db: Session, student_id: int) -> None:
    deleted = db.query(Student).filter(Student.id == student_id).delete()
    if not deleted:
        db.rollback()
        raise NotFoundException(NOT_FOUND_MESSAGE)
    db.commit()
    logger.info(f"Deleted student {student_id}")

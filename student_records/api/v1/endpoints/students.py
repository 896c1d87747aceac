from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from student_records.api.deps import get_db
from student_records.services.student import student as crud_student
from student_records.schemas.student import (
    MessageResponse,
    Student,
    StudentCreate,
    StudentUpdate,
)

router = APIRouter()


@router.get("", response_model=List[Student])
def get_students(db: Session = Depends(get_db)):
    """
    List all students, newest first
    """
    return crud_student.get_students(db)


@router.get("/{student_id}", response_model=Student)
def get_student(
    student_id: int,
    db: Session = Depends(get_db)
):
    """
    Get a single student by ID
    """
    return crud_student.get_student(db, student_id=student_id)


@router.post("", response_model=Student, status_code=status.HTTP_201_CREATED)
def create_student(
    student: StudentCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new student

    Requires:
    - **name**: student name
    - **email**: email, unique across all students
    - **course**: course the student is enrolled in
    """
    return crud_student.create_student(db=db, student=student)


@router.put("/{student_id}", response_model=MessageResponse)
def update_student(
    student_id: int,
    student: StudentUpdate,
    db: Session = Depends(get_db)
):
    """
    Replace name, email and course of a student
    """
    crud_student.update_student(db=db, student_id=student_id, student=student)
    return {"message": "Student updated successfully"}


@router.delete("/{student_id}", response_model=MessageResponse)
def delete_student(
    student_id: int,
    db: Session = Depends(get_db)
):
    crud_student.delete_student(db=db, student_id=student_id)
    return {"message": "Student deleted successfully"}

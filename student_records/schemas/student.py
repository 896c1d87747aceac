from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class StudentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    course: str = Field(..., min_length=1, max_length=255)


class StudentCreate(StudentBase):
    pass


class StudentUpdate(StudentBase):
    pass


class StudentInDB(StudentBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Student(StudentInDB):
    pass


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    message: str
    status: str
    database: str
    version: str

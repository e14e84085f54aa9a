from typing import List, Optional

from pydantic import Field

from app.models.subject_model import SubjectModel
from app.schemas.base import CamelModel, SuccessResponse


class StudentRegister(CamelModel):
    """Body of register and update requests. Presence is checked by the endpoint."""

    student_address: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    second_surname: Optional[str] = None
    studies: Optional[str] = None
    private_key: Optional[str] = Field(None, repr=False)


class StudentStatusChange(CamelModel):
    """Body of deactivate and reactivate requests."""

    student_address: Optional[str] = None
    private_key: Optional[str] = Field(None, repr=False)


class Student(CamelModel):
    address: str
    name: str
    surname: str
    second_surname: str = ""
    studies: str
    active: bool

    @classmethod
    def from_model(cls, model: SubjectModel) -> "Student":
        return cls(
            address=model.address,
            name=model.name,
            surname=model.surname,
            second_surname=model.second_surname,
            studies=model.studies,
            active=model.active,
        )


class TransactionResponse(SuccessResponse):
    transaction_hash: str
    block_number: int
    student_address: Optional[str] = None


class StudentResponse(SuccessResponse):
    student: Student


class IsRegisteredResponse(SuccessResponse):
    is_registered: bool


class StudentCountResponse(SuccessResponse):
    count: int


class StudentPage(SuccessResponse):
    students: List[Student]
    total_count: int
    start_index: int
    count: int

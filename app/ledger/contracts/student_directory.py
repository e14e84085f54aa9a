from typing import ClassVar

from app.exceptions import (
    AlreadyInStateError,
    AlreadyRegisteredError,
    InvalidRangeError,
    NotFoundError,
    NotRegisteredError,
    ValidationError,
)
from app.ledger.contracts.base import AdminControlled, CallContext
from app.models.subject_model import SubjectModel
from app.utils.addresses import is_address, to_checksum_address

MAX_PAGE_SIZE = 100


class StudentDirectory(AdminControlled):
    """Registry of student profiles keyed by account address."""

    NAME = "StudentDirectory"
    TRANSACTIONS: ClassVar[frozenset[str]] = AdminControlled.TRANSACTIONS | {
        "register",
        "update",
        "deactivate",
        "reactivate",
    }
    VIEWS: ClassVar[frozenset[str]] = AdminControlled.VIEWS | {
        "get",
        "is_registered",
        "count",
        "list_range",
    }

    def __init__(self, address: str, deployer: str | None = None):
        super().__init__(address, deployer)
        self._students: dict[str, SubjectModel] = {}
        # Registration order, used for pagination
        self._addresses: list[str] = []

    @staticmethod
    def _require_fields(name: str, surname: str, studies: str) -> None:
        for field, value in (("name", name), ("surname", surname), ("studies", studies)):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{field} must not be empty", field=field)

    def _existing(self, address: str) -> SubjectModel:
        address = self._checked(address)
        student = self._students.get(address)
        if student is None:
            raise NotRegisteredError(address)
        return student

    def register(
        self,
        ctx: CallContext,
        address: str,
        name: str,
        surname: str,
        second_surname: str,
        studies: str,
    ) -> None:
        self._only_admin(ctx)
        address = self._checked(address)
        if address in self._students:
            raise AlreadyRegisteredError(address)
        self._require_fields(name, surname, studies)

        self._students[address] = SubjectModel(
            address=address,
            name=name,
            surname=surname,
            second_surname=second_surname or "",
            studies=studies,
        )
        self._addresses.append(address)
        ctx.emit("StudentRegistered", student=address, name=name, surname=surname)

    def update(
        self,
        ctx: CallContext,
        address: str,
        name: str,
        surname: str,
        second_surname: str,
        studies: str,
    ) -> None:
        self._only_admin(ctx)
        student = self._existing(address)
        self._require_fields(name, surname, studies)

        student.name = name
        student.surname = surname
        student.second_surname = second_surname or ""
        student.studies = studies
        ctx.emit("StudentUpdated", student=student.address)

    def deactivate(self, ctx: CallContext, address: str) -> None:
        self._only_admin(ctx)
        student = self._existing(address)
        if not student.active:
            raise AlreadyInStateError(student.address, active=False)
        student.active = False
        ctx.emit("StudentDeactivated", student=student.address)

    def reactivate(self, ctx: CallContext, address: str) -> None:
        self._only_admin(ctx)
        student = self._existing(address)
        if student.active:
            raise AlreadyInStateError(student.address, active=True)
        student.active = True
        ctx.emit("StudentReactivated", student=student.address)

    def get(self, address: str) -> SubjectModel:
        address = self._checked(address)
        student = self._students.get(address)
        if student is None:
            raise NotFoundError(f"Student not found: {address}", resource_type="student")
        # Callers get a copy, state only changes through transactions
        return SubjectModel(**vars(student))

    def is_registered(self, address: str) -> bool:
        if not is_address(address):
            return False
        return to_checksum_address(address) in self._students

    def count(self) -> int:
        return len(self._addresses)

    def list_range(self, start_index: int, count: int) -> list[str]:
        if start_index < 0:
            raise InvalidRangeError("startIndex must be >= 0")
        if not 1 <= count <= MAX_PAGE_SIZE:
            raise InvalidRangeError(f"count must be between 1 and {MAX_PAGE_SIZE}")
        return list(self._addresses[start_index : start_index + count])

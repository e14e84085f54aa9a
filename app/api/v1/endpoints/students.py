from fastapi import APIRouter, Query, status

from app.schemas.student import (
    IsRegisteredResponse,
    Student,
    StudentCountResponse,
    StudentPage,
    StudentRegister,
    StudentResponse,
    StudentStatusChange,
    TransactionResponse,
)
from app.utils.deps import StudentService
from app.utils.logger import get_logger
from app.utils.validation import check_page_bounds, require_fields

router = APIRouter()
logger = get_logger(__name__)

PROFILE_FIELDS = ("student_address", "name", "surname", "studies", "private_key")


@router.post(
    "/register",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_student(body: StudentRegister, students: StudentService):
    """Register a new student. Requires an admin signing key."""
    require_fields(body, *PROFILE_FIELDS)
    logger.info(
        "Registration request",
        student=body.student_address,
        name=body.name,
        surname=body.surname,
    )
    return await students.register_student(
        body.private_key,
        body.student_address,
        body.name,
        body.surname,
        body.second_surname or "",
        body.studies,
    )


@router.put("/update", response_model=TransactionResponse)
async def update_student(body: StudentRegister, students: StudentService):
    """Overwrite a student's profile fields."""
    require_fields(body, *PROFILE_FIELDS)
    return await students.update_student(
        body.private_key,
        body.student_address,
        body.name,
        body.surname,
        body.second_surname or "",
        body.studies,
    )


@router.put("/deactivate", response_model=TransactionResponse)
async def deactivate_student(body: StudentStatusChange, students: StudentService):
    require_fields(body, "student_address", "private_key")
    return await students.deactivate_student(body.private_key, body.student_address)


@router.put("/reactivate", response_model=TransactionResponse)
async def reactivate_student(body: StudentStatusChange, students: StudentService):
    require_fields(body, "student_address", "private_key")
    return await students.reactivate_student(body.private_key, body.student_address)


@router.get("/student/{student_address}", response_model=StudentResponse)
async def get_student(student_address: str, students: StudentService):
    student = await students.get_student(student_address)
    return StudentResponse(student=Student.from_model(student))


@router.get("/isRegistered/{student_address}", response_model=IsRegisteredResponse)
async def is_student_registered(student_address: str, students: StudentService):
    return IsRegisteredResponse(
        is_registered=await students.is_student_registered(student_address)
    )


@router.get("/count", response_model=StudentCountResponse)
async def get_student_count(students: StudentService):
    return StudentCountResponse(count=await students.get_student_count())


@router.get("/all", response_model=StudentPage)
async def get_all_students(
    students: StudentService,
    start_index: int = Query(0, alias="startIndex"),
    count: int = Query(10),
):
    """Paginated listing in registration order."""
    check_page_bounds(start_index, count)
    page = await students.get_all_students(start_index, count)
    return StudentPage(
        students=[Student.from_model(s) for s in page["students"]],
        total_count=page["total_count"],
        start_index=start_index,
        count=len(page["students"]),
    )

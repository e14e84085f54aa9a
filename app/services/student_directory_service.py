from typing import Any, Dict

from app.ledger.chain import Ledger
from app.ledger.contracts.student_directory import StudentDirectory
from app.ledger.receipts import TransactionReceipt
from app.models.subject_model import SubjectModel
from app.utils.addresses import normalize_address
from app.utils.logger import get_logger
from app.utils.validation import check_page_bounds

logger = get_logger(__name__)

CONTRACT = StudentDirectory.NAME


def _transaction_result(receipt: TransactionReceipt, address: str) -> Dict[str, Any]:
    return {
        "success": True,
        "transaction_hash": receipt.transaction_hash,
        "block_number": receipt.block_number,
        "student_address": address,
    }


class StudentDirectoryService:
    """Maps student requests onto StudentDirectory contract calls."""

    def __init__(self, ledger: Ledger):
        self.ledger = ledger

    async def register_student(
        self,
        private_key: str,
        student_address: str,
        name: str,
        surname: str,
        second_surname: str,
        studies: str,
    ) -> Dict[str, Any]:
        address = normalize_address(student_address, field="studentAddress")
        receipt = await self.ledger.transact(
            CONTRACT,
            "register",
            private_key,
            address,
            name,
            surname,
            second_surname or "",
            studies,
        )
        logger.info("Student registered", student=address, tx_hash=receipt.transaction_hash)
        return _transaction_result(receipt, address)

    async def update_student(
        self,
        private_key: str,
        student_address: str,
        name: str,
        surname: str,
        second_surname: str,
        studies: str,
    ) -> Dict[str, Any]:
        address = normalize_address(student_address, field="studentAddress")
        receipt = await self.ledger.transact(
            CONTRACT,
            "update",
            private_key,
            address,
            name,
            surname,
            second_surname or "",
            studies,
        )
        logger.info("Student updated", student=address)
        return _transaction_result(receipt, address)

    async def deactivate_student(
        self, private_key: str, student_address: str
    ) -> Dict[str, Any]:
        address = normalize_address(student_address, field="studentAddress")
        receipt = await self.ledger.transact(CONTRACT, "deactivate", private_key, address)
        logger.info("Student deactivated", student=address)
        return _transaction_result(receipt, address)

    async def reactivate_student(
        self, private_key: str, student_address: str
    ) -> Dict[str, Any]:
        address = normalize_address(student_address, field="studentAddress")
        receipt = await self.ledger.transact(CONTRACT, "reactivate", private_key, address)
        logger.info("Student reactivated", student=address)
        return _transaction_result(receipt, address)

    async def get_student(self, student_address: str) -> SubjectModel:
        address = normalize_address(student_address, field="studentAddress")
        return await self.ledger.call(CONTRACT, "get", address)

    async def is_student_registered(self, student_address: str) -> bool:
        # Malformed addresses are rejected here, the contract itself never fails
        address = normalize_address(student_address, field="studentAddress")
        return await self.ledger.call(CONTRACT, "is_registered", address)

    async def get_student_count(self) -> int:
        return await self.ledger.call(CONTRACT, "count")

    async def get_all_students(self, start_index: int, count: int) -> Dict[str, Any]:
        """
        One page of students in registration order.

        A start index past the end yields an empty page with the real total.
        """
        check_page_bounds(start_index, count)
        total_count = await self.get_student_count()
        if start_index >= total_count:
            return {"students": [], "total_count": total_count}

        addresses = await self.ledger.call(CONTRACT, "list_range", start_index, count)
        students = [await self.ledger.call(CONTRACT, "get", a) for a in addresses]
        return {"students": students, "total_count": total_count}

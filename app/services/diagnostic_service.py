"""
Diagnostics for the ledger connection and the deployed contracts.
"""

import platform
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from app.config import Settings
from app.exceptions import AcademicRecordsException
from app.ledger.chain import Ledger
from app.ledger.contracts.academic_records import AcademicRecords
from app.ledger.contracts.student_directory import StudentDirectory
from app.services.ipfs_store import ContentStore
from app.utils.addresses import ZERO_ADDRESS
from app.utils.logger import get_logger

logger = get_logger(__name__)


class DiagnosticService:
    def __init__(self, settings: Settings, ledger: Ledger, store: ContentStore):
        self.settings = settings
        self.ledger = ledger
        self.store = store

    def check_provider(self) -> Dict[str, Any]:
        return {"success": True, **self.ledger.status()}

    async def _test_contract_method(self, name: str) -> bool:
        """Probe a read method to confirm the contract answers as expected."""
        try:
            if name == StudentDirectory.NAME:
                await self.ledger.call(name, "count")
                await self.ledger.call(name, "is_registered", ZERO_ADDRESS)
            else:
                await self.ledger.call(name, "count", ZERO_ADDRESS)
            return True
        except AcademicRecordsException as e:
            logger.warning("Contract method test failed", contract=name, error=e.message)
            return False

    async def _contract_report(self, name: str, configured: str) -> Dict[str, Any]:
        if not self.ledger.has_contract(name):
            return {
                "address": configured or None,
                "hasCode": False,
                "error": f"{name} is not deployed",
            }
        deployed = self.ledger.contract(name).address
        return {
            "address": deployed,
            "configuredAddress": configured or None,
            "matchesConfiguration": not configured or configured.lower() == deployed.lower(),
            "hasCode": True,
            "isABICompatible": await self._test_contract_method(name),
        }

    async def check_contract(self) -> Dict[str, Any]:
        return {
            "success": True,
            "studentDirectory": await self._contract_report(
                StudentDirectory.NAME, self.settings.STUDENT_DIRECTORY_ADDRESS
            ),
            "academicRecords": await self._contract_report(
                AcademicRecords.NAME, self.settings.CONTRACT_ADDRESS
            ),
        }

    async def run_full_diagnostics(self) -> Dict[str, Any]:
        results: Dict[str, Any] = {
            "environment": {
                "pythonVersion": sys.version.split()[0],
                "platform": platform.system().lower(),
                "arch": platform.machine(),
                "environment": self.settings.ENVIRONMENT,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "configuredAddresses": {
                "studentDirectory": self.settings.STUDENT_DIRECTORY_ADDRESS or None,
                "contract": self.settings.CONTRACT_ADDRESS or None,
            },
        }
        results["provider"] = self.check_provider()
        results["contracts"] = await self.check_contract()
        results["ipfs"] = await self.store.status()
        results["recommendations"] = self.generate_recommendations(results)
        return results

    def generate_recommendations(self, results: Dict[str, Any]) -> List[str]:
        recommendations = []

        if not self.settings.ADMIN_PRIVATE_KEY:
            recommendations.append(
                "ADMIN_PRIVATE_KEY is not configured, contracts cannot be deployed "
                "and no account holds the admin role."
            )

        for key, setting in (
            ("studentDirectory", "STUDENT_DIRECTORY_ADDRESS"),
            ("academicRecords", "CONTRACT_ADDRESS"),
        ):
            report = results.get("contracts", {}).get(key, {})
            if not report.get("hasCode"):
                recommendations.append(
                    f"No contract found for {setting}. Deploy the contract and "
                    "update the address in your .env file."
                )
            elif report.get("matchesConfiguration") is False:
                recommendations.append(
                    f"{setting} does not match the deployed address {report['address']}."
                )
            elif report.get("isABICompatible") is False:
                recommendations.append(
                    f"Contract for {setting} exists but does not answer read calls."
                )

        if not results.get("ipfs", {}).get("primaryAvailable"):
            recommendations.append(
                "IPFS node is unreachable, uploads use local fingerprints and are "
                "only retrievable from this process."
            )

        if not recommendations:
            recommendations.append("No issues detected with the current configuration.")
        return recommendations

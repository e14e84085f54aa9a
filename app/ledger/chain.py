"""
In-process ledger hosting the AcademicRecords and StudentDirectory contracts.

The ledger provides what the contracts rely on from a blockchain node:
accounts resolved from signing keys, one-at-a-time execution of every
state-changing call, a block per transaction, receipts and an event log.
"""

import asyncio
import json
import time
from typing import Any, Callable

from app.exceptions import AcademicRecordsException, LedgerUnavailableError
from app.ledger.accounts import Account, account_from_key
from app.ledger.contracts.academic_records import AcademicRecords
from app.ledger.contracts.base import AdminControlled, CallContext
from app.ledger.contracts.student_directory import StudentDirectory
from app.ledger.receipts import Event, TransactionReceipt
from app.utils.addresses import is_address, to_checksum_address
from app.utils.hashing import keccak256, keccak256_hex
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _contract_address(deployer: str, nonce: int) -> str:
    digest = keccak256(f"{deployer.lower()}:{nonce}".encode("ascii"))
    return to_checksum_address("0x" + digest[-20:].hex())


class Ledger:
    def __init__(
        self,
        rpc_url: str = "in-process",
        chain_id: int = 31337,
        clock: Callable[[], float] = time.time,
    ):
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self._clock = clock
        self._lock = asyncio.Lock()
        self._contracts: dict[str, AdminControlled] = {}
        self._nonces: dict[str, int] = {}
        self.block_number = 0
        self.events: list[Event] = []

    # Deployment

    def deploy(
        self, contract_cls: type[AdminControlled], deployer_key: str, address: str = ""
    ) -> AdminControlled:
        """Deploy a contract with the key's account as first admin."""
        deployer = account_from_key(deployer_key)
        nonce = self._next_nonce(deployer)
        if address and is_address(address):
            address = to_checksum_address(address)
        else:
            address = _contract_address(deployer.address, nonce)

        contract = contract_cls(address, deployer.address)
        self._contracts[contract_cls.NAME] = contract
        self.block_number += 1
        logger.info(
            "Contract deployed",
            contract=contract_cls.NAME,
            address=address,
            deployer=deployer.address,
            block=self.block_number,
        )
        return contract

    def contract(self, name: str) -> AdminControlled:
        try:
            return self._contracts[name]
        except KeyError:
            raise LedgerUnavailableError(f"Contract {name} is not deployed") from None

    def has_contract(self, name: str) -> bool:
        return name in self._contracts

    @property
    def contracts(self) -> dict[str, AdminControlled]:
        return dict(self._contracts)

    # Execution

    def _next_nonce(self, account: Account) -> int:
        nonce = self._nonces.get(account.address, 0)
        self._nonces[account.address] = nonce + 1
        return nonce

    async def transact(
        self, contract_name: str, method: str, signer_key: str, *args: Any
    ) -> TransactionReceipt:
        """
        Execute a state-changing contract method.

        Calls are serialized, a failing call leaves no trace apart from the
        sender's nonce.
        """
        contract = self.contract(contract_name)
        if method not in contract.TRANSACTIONS:
            raise LedgerUnavailableError(f"{contract_name}.{method} is not a transaction")
        sender = account_from_key(signer_key)

        async with self._lock:
            nonce = self._next_nonce(sender)
            ctx = CallContext(sender=sender.address, timestamp=int(self._clock()))
            try:
                return_value = getattr(contract, method)(ctx, *args)
            except AcademicRecordsException as e:
                logger.info(
                    "Transaction reverted",
                    contract=contract_name,
                    method=method,
                    sender=sender.address,
                    reason=e.message,
                )
                raise
            except Exception as e:
                logger.exception(
                    "Contract execution failed",
                    contract=contract_name,
                    method=method,
                    error=str(e),
                )
                raise LedgerUnavailableError(
                    f"Execution of {contract_name}.{method} failed"
                ) from e

            self.block_number += 1
            tx_hash = keccak256_hex(
                json.dumps(
                    [self.chain_id, sender.address, nonce, contract_name, method, args],
                    default=str,
                ).encode("utf-8")
            )
            events = [
                Event(
                    name=name,
                    contract=contract_name,
                    args=event_args,
                    block_number=self.block_number,
                    transaction_hash=tx_hash,
                )
                for name, event_args in ctx.events
            ]
            self.events.extend(events)

        receipt = TransactionReceipt(
            transaction_hash=tx_hash,
            block_number=self.block_number,
            sender=sender.address,
            contract=contract_name,
            method=method,
            timestamp=ctx.timestamp,
            events=events,
            return_value=return_value,
        )
        logger.info(
            "Transaction mined",
            contract=contract_name,
            method=method,
            tx_hash=tx_hash,
            block=receipt.block_number,
        )
        return receipt

    async def call(self, contract_name: str, method: str, *args: Any) -> Any:
        """Execute a read-only contract method."""
        contract = self.contract(contract_name)
        if method not in contract.VIEWS:
            raise LedgerUnavailableError(f"{contract_name}.{method} is not a view")
        return getattr(contract, method)(*args)

    def get_events(self, event_name: str | None = None, /, **filters: Any) -> list[Event]:
        return [
            event
            for event in self.events
            if (event_name is None or event.name == event_name)
            and all(event.args.get(k) == v for k, v in filters.items())
        ]

    def status(self) -> dict[str, Any]:
        return {
            "connected": True,
            "rpcUrl": self.rpc_url,
            "chainId": self.chain_id,
            "blockNumber": self.block_number,
            "contracts": {
                name: contract.address for name, contract in self._contracts.items()
            },
        }


def build_ledger(settings) -> Ledger:
    """Create the ledger and deploy both contracts with the configured admin key."""
    ledger = Ledger(rpc_url=settings.RPC_URL, chain_id=settings.CHAIN_ID)
    if not settings.ADMIN_PRIVATE_KEY:
        logger.warning("No admin key configured, contracts not deployed")
        return ledger

    ledger.deploy(
        StudentDirectory,
        settings.ADMIN_PRIVATE_KEY,
        address=settings.STUDENT_DIRECTORY_ADDRESS,
    )
    ledger.deploy(
        AcademicRecords, settings.ADMIN_PRIVATE_KEY, address=settings.CONTRACT_ADDRESS
    )
    return ledger

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Event:
    name: str
    contract: str
    args: dict[str, Any]
    block_number: int
    transaction_hash: str


@dataclass
class TransactionReceipt:
    transaction_hash: str
    block_number: int
    sender: str
    contract: str
    method: str
    timestamp: int
    events: list[Event] = field(default_factory=list)
    return_value: Any = None

    def event(self, name: str) -> Event | None:
        """First event with the given name, if the transaction emitted one."""
        return next((e for e in self.events if e.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactionHash": self.transaction_hash,
            "blockNumber": self.block_number,
            "from": self.sender,
            "timestamp": self.timestamp,
            "events": [{"event": e.name, "args": e.args} for e in self.events],
        }

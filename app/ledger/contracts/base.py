from dataclasses import dataclass, field
from typing import Any, ClassVar

from app.exceptions import AuthorizationError, InvalidAddressError
from app.utils.addresses import is_address, to_checksum_address


@dataclass
class CallContext:
    """Execution context of one transaction: who sent it and when."""

    sender: str
    timestamp: int
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def emit(self, event: str, /, **args: Any) -> None:
        self.events.append((event, args))


class AdminControlled:
    """
    Role check shared by both contracts.

    The deployer is the first admin. Admins can grant the role to other
    accounts, there is no way to revoke it.
    """

    NAME: ClassVar[str] = "Contract"
    TRANSACTIONS: ClassVar[frozenset[str]] = frozenset({"add_admin"})
    VIEWS: ClassVar[frozenset[str]] = frozenset({"is_admin"})

    def __init__(self, address: str, deployer: str | None = None):
        self.address = address
        self._admins: set[str] = set()
        if deployer:
            self._admins.add(to_checksum_address(deployer))

    def _only_admin(self, ctx: CallContext) -> None:
        if ctx.sender not in self._admins:
            raise AuthorizationError(f"{ctx.sender} does not hold the admin role")

    @staticmethod
    def _checked(address: str, field: str = "address") -> str:
        if not is_address(address):
            raise InvalidAddressError(address, field=field)
        return to_checksum_address(address)

    def add_admin(self, ctx: CallContext, account: str) -> None:
        self._only_admin(ctx)
        account = self._checked(account, "account")
        self._admins.add(account)
        ctx.emit("AdminAdded", account=account, sender=ctx.sender)

    def is_admin(self, account: str) -> bool:
        if not is_address(account):
            return False
        return to_checksum_address(account) in self._admins

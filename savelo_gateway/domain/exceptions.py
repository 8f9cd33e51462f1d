"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Plan configuration is outside the chosen tier's bounds"""

    pass


class OwnershipMismatchError(DomainException):
    """Fetched plan is owned by a different wallet than the connected one"""

    def __init__(self, plan_id: int, owner: str, wallet: str):
        super().__init__(f"Plan {plan_id} belongs to {owner}, not {wallet}")
        self.plan_id = plan_id
        self.owner = owner
        self.wallet = wallet


class RejectedError(DomainException):
    """User declined the wallet prompt"""

    pass


class NetworkError(DomainException):
    """Ledger is unreachable or returned a server error"""

    pass


class NotActiveError(DomainException):
    """Payment attempted on a plan that is not payable"""

    pass


class MutationInFlightError(DomainException):
    """A create/pay call for the same key is still awaiting confirmation"""

    pass

"""Error taxonomy shared by every user repository implementation.

The HTTP boundary maps these to status codes in one place
(``userbff.api.errors``); everything below it raises them unchanged.
"""


class UserRepositoryError(Exception):
    """Base class for repository failures."""


class DatabaseError(UserRepositoryError):
    """Transport failure, non-success remote status or failed transaction RPC."""


class PasswordError(DatabaseError):
    """The password hasher failed; a configuration fault, not bad input."""


class TransactionIndeterminateError(DatabaseError):
    """The mutation was applied remotely but the commit RPC failed.

    The remote state is unknown: the change may or may not survive once the
    store gives up on the open transaction.
    """

    def __init__(self, message: str, transaction_id: str) -> None:
        super().__init__(message)
        self.transaction_id = transaction_id


class UserNotFoundError(UserRepositoryError):
    """The targeted user does not exist."""

    def __init__(self, message: str = "User not found") -> None:
        super().__init__(message)


class InvalidDataError(UserRepositoryError):
    """Input failed local validation."""


class WireFormatError(InvalidDataError):
    """A remote payload did not match the expected user schema."""

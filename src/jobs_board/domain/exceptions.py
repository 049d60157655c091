"""Domain exceptions for the jobs board.

These exceptions are framework-agnostic. Workflows catch them at their
boundary and turn them into a WorkflowResult; the proxy API middleware
translates them into JSON error responses.
"""

from jobs_board.domain.enums import ErrorKind


class JobsBoardError(Exception):
    """Base exception for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, code: str = "JOBS_BOARD_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


# --- Caught before any network call ---


class ValidationError(JobsBoardError):
    """Malformed or incomplete user input."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message=message, code="VALIDATION_ERROR")
        self.field = field


class AuthorizationError(JobsBoardError):
    """No credential for a poster-gated action (no token, no wallet)."""

    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str = "Connect wallet or use original device") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR")


class InvalidStateTransitionError(JobsBoardError):
    """Raised when a workflow step is fired out of order."""

    def __init__(self, current_state: str, attempted: str) -> None:
        super().__init__(
            message=f"Invalid workflow transition: {current_state} -> {attempted}",
            code="INVALID_STATE_TRANSITION",
        )
        self.current_state = current_state
        self.attempted = attempted


# --- Signer / chain ---


class SignerRejectedError(JobsBoardError):
    """The signer refused: user rejection, no key configured, or wrong network.

    Transient: the user can retry the action.
    """

    kind = ErrorKind.SIGNER

    def __init__(self, message: str = "Transaction rejected by signer") -> None:
        super().__init__(message=message, code="SIGNER_REJECTED")


class TransactionRevertedError(JobsBoardError):
    """Transaction reverted on-chain (or in pre-flight gas estimation)."""

    kind = ErrorKind.REVERTED

    def __init__(self, reason: str | None = None, tx_hash: str | None = None) -> None:
        super().__init__(
            message=f"Transaction reverted: {reason or 'no reason given'}",
            code="TRANSACTION_REVERTED",
        )
        self.reason = reason
        self.tx_hash = tx_hash


class ConfirmationTimeoutError(JobsBoardError):
    """A submitted transaction was not confirmed in time.

    The transaction may still be mined later; it is never resubmitted.
    """

    kind = ErrorKind.TIMEOUT

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(
            message=f"Transaction {tx_hash} not confirmed after {timeout:g}s",
            code="CONFIRMATION_TIMEOUT",
        )
        self.tx_hash = tx_hash
        self.timeout = timeout


class WorkflowCancelledError(JobsBoardError):
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Cancelled") -> None:
        super().__init__(message=message, code="WORKFLOW_CANCELLED")


# --- Transport ---


class TransportError(JobsBoardError):
    """API or RPC unreachable. Retryable by re-issuing the user action."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, code: str = "TRANSPORT_ERROR") -> None:
        super().__init__(message=message, code=code)


class ChainReadError(TransportError):
    """A read-only contract query failed for a reason other than 'not found'."""

    def __init__(self, call: str, cause: str) -> None:
        super().__init__(message=f"Chain read {call} failed: {cause}", code="CHAIN_READ_ERROR")
        self.call = call


class JobStoreError(TransportError):
    """The job store answered with an error (or could not be reached)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message=message, code="JOB_STORE_ERROR")
        self.status_code = status_code

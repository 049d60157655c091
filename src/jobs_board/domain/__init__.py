"""Domain layer — pure business logic with zero framework dependencies."""

from jobs_board.domain.enums import (
    Action,
    ErrorKind,
    EscrowState,
    JobStatus,
    PaymentStatus,
    StepStatus,
    SubmissionStatus,
    WorkflowOutcome,
)
from jobs_board.domain.exceptions import (
    AuthorizationError,
    JobsBoardError,
    SignerRejectedError,
    TransactionRevertedError,
    TransportError,
    ValidationError,
)
from jobs_board.domain.models import (
    ZERO_ADDRESS,
    AgentIdentity,
    EscrowRecord,
    PosterCredentials,
    Reputation,
)
from jobs_board.domain.money import Payout, compute_payout, from_units, to_units
from jobs_board.domain.signer_protocol import TransactionSigner, TxReceipt

__all__ = [
    "Action",
    "ErrorKind",
    "EscrowState",
    "JobStatus",
    "PaymentStatus",
    "StepStatus",
    "SubmissionStatus",
    "WorkflowOutcome",
    "AuthorizationError",
    "JobsBoardError",
    "SignerRejectedError",
    "TransactionRevertedError",
    "TransportError",
    "ValidationError",
    "ZERO_ADDRESS",
    "AgentIdentity",
    "EscrowRecord",
    "PosterCredentials",
    "Reputation",
    "Payout",
    "compute_payout",
    "from_units",
    "to_units",
    "TransactionSigner",
    "TxReceipt",
]

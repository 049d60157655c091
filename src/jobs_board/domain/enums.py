"""Domain enumerations for the jobs board.

These enums define the canonical states and types used throughout the system.
They are framework-agnostic (no web3, no FastAPI imports).
"""

import enum


class JobStatus(enum.StrEnum):
    """Off-chain lifecycle of a job, owned by the job store."""

    OPEN = "open"
    COMPLETED = "completed"


class PaymentStatus(enum.StrEnum):
    """Off-chain payment flag, set by mark-paid."""

    UNPAID = "unpaid"
    PAID = "paid"


class SubmissionStatus(enum.StrEnum):
    PENDING = "pending"
    WINNER = "winner"


class EscrowState(enum.StrEnum):
    """Display state of the on-chain escrow overlay for a job."""

    NONE = "none"
    ESCROWED = "escrowed"
    RELEASED = "released"
    REFUNDED = "refunded"


class Action(enum.StrEnum):
    """User actions a job card can offer.

    Which actions are offered is decided by JobView.available_actions from
    the merged off-chain job record and on-chain escrow overlay.
    """

    SUBMIT_WORK = "submit_work"
    FUND_ESCROW = "fund_escrow"
    REFUND = "refund"
    RELEASE_FUNDS = "release_funds"
    MARK_PAID = "mark_paid"
    LEAVE_FEEDBACK = "leave_feedback"
    VIEW_SUBMISSIONS = "view_submissions"


class StepStatus(enum.StrEnum):
    """Outcome of a single workflow step."""

    NOT_STARTED = "not_started"
    SKIPPED = "skipped"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    # submitted, but whether it was mined is unknown
    UNCONFIRMED = "unconfirmed"


class WorkflowOutcome(enum.StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PARTIAL = "partial"
    CANCELLED = "cancelled"


class ErrorKind(enum.StrEnum):
    """Failure taxonomy surfaced to the user.

    NOT_FOUND is deliberately absent: a missing agent, escrow record or
    submission list is a normal empty result, never an error.
    """

    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    SIGNER = "signer"
    REVERTED = "reverted"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INTERNAL = "internal"

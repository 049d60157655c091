"""Application services — resolution, reconciliation, workflows, board state."""

from jobs_board.services.agent_resolver import AgentResolver, IndexLookup, ScanLookup
from jobs_board.services.board_view import BoardView
from jobs_board.services.escrow_reconciler import EscrowOverlay, EscrowReconciler, JobView
from jobs_board.services.orchestrator import (
    StepRecord,
    TransactionOrchestrator,
    WorkflowResult,
)
from jobs_board.services.registration_index import RegistrationIndex

__all__ = [
    "AgentResolver",
    "IndexLookup",
    "ScanLookup",
    "BoardView",
    "EscrowOverlay",
    "EscrowReconciler",
    "JobView",
    "StepRecord",
    "TransactionOrchestrator",
    "WorkflowResult",
    "RegistrationIndex",
]

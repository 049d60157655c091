"""Transaction workflow state machines.

Uses python-statemachine to enforce step ordering at the domain level. The
orchestrator fires one event per finished step; an out-of-order event
(for example funding before a required approval is confirmed) raises
TransitionNotAllowed before any transaction is issued.

Fund escrow:
    CHECK_ALLOWANCE -> APPROVE          (needs_approval)
    CHECK_ALLOWANCE -> FUND             (allowance_sufficient)
    APPROVE         -> FUND             (approved)
    FUND            -> RECONCILE        (funded)
    RECONCILE       -> DONE             (reconciled)

Select winner:
    AUTHORIZE        -> SELECT_ON_CHAIN  (authorized_funded)
    AUTHORIZE        -> SELECT_OFF_CHAIN (authorized)
    SELECT_ON_CHAIN  -> SELECT_OFF_CHAIN (selected_on_chain)
    SELECT_OFF_CHAIN -> DONE             (selected)

Release funds:
    RELEASE   -> MARK_PAID  (released)
    MARK_PAID -> RECONCILE  (marked_paid)
    RECONCILE -> DONE       (reconciled)

Refund:
    CONFIRM   -> REFUND     (confirmed)
    CONFIRM   -> CANCELLED  (declined)
    REFUND    -> RECONCILE  (refunded)
    RECONCILE -> DONE       (reconciled)

Every machine also has `fail` (any step that submits something -> FAILED)
and `cancel` (any step not yet issued -> CANCELLED).
"""

from __future__ import annotations

from statemachine import State, StateMachine


class _WorkflowMachineMixin:
    """Shared helpers; the concrete machines declare their own states."""

    def __init__(self, current_status: str | None = None) -> None:
        if current_status is None:
            super().__init__()
            return
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        return str(self.current_state.value)

    @property
    def is_finished(self) -> bool:
        return self.current_state.final

    def get_allowed_events(self) -> list[str]:
        return [event.name for event in self.allowed_events]


class FundEscrowMachine(_WorkflowMachineMixin, StateMachine):
    """approve -> fund, with the approval skipped when the allowance covers it."""

    CHECK_ALLOWANCE = State("CHECK_ALLOWANCE", initial=True)
    APPROVE = State("APPROVE")
    FUND = State("FUND")
    RECONCILE = State("RECONCILE")
    DONE = State("DONE", final=True)
    FAILED = State("FAILED", final=True)
    CANCELLED = State("CANCELLED", final=True)

    needs_approval = CHECK_ALLOWANCE.to(APPROVE)
    allowance_sufficient = CHECK_ALLOWANCE.to(FUND)
    approved = APPROVE.to(FUND)
    funded = FUND.to(RECONCILE)
    reconciled = RECONCILE.to(DONE)

    fail = CHECK_ALLOWANCE.to(FAILED) | APPROVE.to(FAILED) | FUND.to(FAILED)
    cancel = CHECK_ALLOWANCE.to(CANCELLED) | APPROVE.to(CANCELLED) | FUND.to(CANCELLED)


class SelectWinnerMachine(_WorkflowMachineMixin, StateMachine):
    """Optional on-chain selection, then the mandatory job store update."""

    AUTHORIZE = State("AUTHORIZE", initial=True)
    SELECT_ON_CHAIN = State("SELECT_ON_CHAIN")
    SELECT_OFF_CHAIN = State("SELECT_OFF_CHAIN")
    DONE = State("DONE", final=True)
    FAILED = State("FAILED", final=True)
    CANCELLED = State("CANCELLED", final=True)

    authorized_funded = AUTHORIZE.to(SELECT_ON_CHAIN)
    authorized = AUTHORIZE.to(SELECT_OFF_CHAIN)
    selected_on_chain = SELECT_ON_CHAIN.to(SELECT_OFF_CHAIN)
    selected = SELECT_OFF_CHAIN.to(DONE)

    fail = AUTHORIZE.to(FAILED) | SELECT_ON_CHAIN.to(FAILED) | SELECT_OFF_CHAIN.to(FAILED)
    cancel = SELECT_ON_CHAIN.to(CANCELLED) | SELECT_OFF_CHAIN.to(CANCELLED)


class ReleaseFundsMachine(_WorkflowMachineMixin, StateMachine):
    """On-chain release, then the off-chain mark-paid notification."""

    RELEASE = State("RELEASE", initial=True)
    MARK_PAID = State("MARK_PAID")
    RECONCILE = State("RECONCILE")
    DONE = State("DONE", final=True)
    FAILED = State("FAILED", final=True)
    CANCELLED = State("CANCELLED", final=True)

    released = RELEASE.to(MARK_PAID)
    marked_paid = MARK_PAID.to(RECONCILE)
    reconciled = RECONCILE.to(DONE)

    fail = RELEASE.to(FAILED) | MARK_PAID.to(FAILED)
    cancel = RELEASE.to(CANCELLED) | MARK_PAID.to(CANCELLED)


class RefundMachine(_WorkflowMachineMixin, StateMachine):
    """Confirmation gate, then a single irreversible refund transaction."""

    CONFIRM = State("CONFIRM", initial=True)
    REFUND = State("REFUND")
    RECONCILE = State("RECONCILE")
    DONE = State("DONE", final=True)
    FAILED = State("FAILED", final=True)
    CANCELLED = State("CANCELLED", final=True)

    confirmed = CONFIRM.to(REFUND)
    declined = CONFIRM.to(CANCELLED)
    refunded = REFUND.to(RECONCILE)
    reconciled = RECONCILE.to(DONE)

    fail = REFUND.to(FAILED)
    cancel = REFUND.to(CANCELLED)


def validate_transition(machine_cls: type[StateMachine], current_status: str, event_name: str) -> str:
    """Fire `event_name` on a throwaway machine and return the resulting status.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the status or event name is invalid.
    """
    sm = machine_cls(current_status=current_status)

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    event_method()
    return sm.status

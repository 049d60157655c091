"""Tests for the workflow state machines.

These tests verify that:
    1. Every workflow's happy path reaches DONE.
    2. Out-of-order steps are blocked (e.g. FUND before a required APPROVE).
    3. fail / cancel are only possible from the steps that allow them.
    4. The convenience function validate_transition works.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from jobs_board.domain.state_machine import (
    FundEscrowMachine,
    RefundMachine,
    ReleaseFundsMachine,
    SelectWinnerMachine,
    validate_transition,
)


class TestFundEscrow:
    def test_with_approval(self) -> None:
        sm = FundEscrowMachine()
        assert sm.status == "CHECK_ALLOWANCE"

        sm.needs_approval()
        assert sm.status == "APPROVE"

        sm.approved()
        assert sm.status == "FUND"

        sm.funded()
        sm.reconciled()
        assert sm.status == "DONE"
        assert sm.is_finished

    def test_allowance_sufficient_skips_approve(self) -> None:
        sm = FundEscrowMachine()
        sm.allowance_sufficient()
        assert sm.status == "FUND"

    def test_cannot_fund_before_approval_confirmed(self) -> None:
        sm = FundEscrowMachine()
        sm.needs_approval()
        with pytest.raises(TransitionNotAllowed):
            sm.funded()

    def test_cannot_skip_allowance_check(self) -> None:
        sm = FundEscrowMachine()
        with pytest.raises(TransitionNotAllowed):
            sm.approved()

    def test_fail_from_fund(self) -> None:
        sm = FundEscrowMachine("FUND")
        sm.fail()
        assert sm.status == "FAILED"

    def test_no_fail_after_fund_confirmed(self) -> None:
        sm = FundEscrowMachine("RECONCILE")
        assert "fail" not in sm.get_allowed_events()


class TestSelectWinner:
    def test_on_chain_path(self) -> None:
        sm = SelectWinnerMachine()
        sm.authorized_funded()
        assert sm.status == "SELECT_ON_CHAIN"
        sm.selected_on_chain()
        sm.selected()
        assert sm.status == "DONE"

    def test_off_chain_only_path(self) -> None:
        sm = SelectWinnerMachine()
        sm.authorized()
        assert sm.status == "SELECT_OFF_CHAIN"
        sm.selected()
        assert sm.status == "DONE"

    def test_resume_at_off_chain(self) -> None:
        sm = SelectWinnerMachine("SELECT_OFF_CHAIN")
        assert sm.get_allowed_events() and "selected" in sm.get_allowed_events()

    def test_cannot_cancel_before_authorization(self) -> None:
        sm = SelectWinnerMachine()
        with pytest.raises(TransitionNotAllowed):
            sm.cancel()


class TestReleaseAndRefund:
    def test_release_path(self) -> None:
        sm = ReleaseFundsMachine()
        sm.released()
        sm.marked_paid()
        sm.reconciled()
        assert sm.status == "DONE"

    def test_mark_paid_cannot_precede_release(self) -> None:
        sm = ReleaseFundsMachine()
        with pytest.raises(TransitionNotAllowed):
            sm.marked_paid()

    def test_refund_declined(self) -> None:
        sm = RefundMachine()
        sm.declined()
        assert sm.status == "CANCELLED"
        assert sm.is_finished

    def test_refund_cannot_run_unconfirmed(self) -> None:
        sm = RefundMachine()
        with pytest.raises(TransitionNotAllowed):
            sm.refunded()


class TestValidateTransition:
    def test_valid_transition(self) -> None:
        assert validate_transition(FundEscrowMachine, "APPROVE", "approved") == "FUND"

    def test_invalid_transition(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition(FundEscrowMachine, "CHECK_ALLOWANCE", "funded")

    def test_unknown_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            FundEscrowMachine("NOT_A_STATE")

    def test_unknown_event(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition(RefundMachine, "CONFIRM", "explode")

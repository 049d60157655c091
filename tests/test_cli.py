"""Tests for the operator CLI commands that need no network."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from jobs_board.cli import build_parser, print_result, run
from jobs_board.domain.enums import StepStatus, WorkflowOutcome
from jobs_board.services.orchestrator import StepRecord, WorkflowResult


class TestParser:
    def test_select_winner_resume_step(self) -> None:
        args = build_parser().parse_args(["select-winner", "job_1", "sub_1", "--resume-step", "SELECT_OFF_CHAIN"])
        assert args.resume_step == "SELECT_OFF_CHAIN"

    def test_select_winner_accepts_printed_resume_point(self) -> None:
        args = build_parser().parse_args(["select-winner", "job_1", "sub_1", "--resume-step", "AUTHORIZE"])
        assert args.resume_step == "AUTHORIZE"

    def test_feedback_rating_is_int(self) -> None:
        args = build_parser().parse_args(["feedback", "job_1", "90", "--comment", "nice"])
        assert args.rating == 90

    def test_unknown_resume_step_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["select-winner", "job_1", "sub_1", "--resume-step", "DONE"])


class TestOfflineCommands:
    @pytest.mark.asyncio
    async def test_payout(self, settings, capsys) -> None:
        args = build_parser().parse_args(["payout", "10.00"])

        assert await run(args, settings) == 0
        out = capsys.readouterr().out
        assert "fee 0.20" in out
        assert "winner receives 9.80" in out

    @pytest.mark.asyncio
    async def test_payout_custom_fee(self, settings, capsys) -> None:
        args = build_parser().parse_args(["payout", "100", "--fee-bps", "500"])

        await run(args, settings)

        assert "winner receives 95.00" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_manifest(self, settings, capsys) -> None:
        args = build_parser().parse_args(["manifest"])

        assert await run(args, settings) == 0
        manifest = json.loads(capsys.readouterr().out)
        assert manifest["blockchain"]["chain_id"] == settings.chain_id
        assert manifest["capabilities"]["platform_fee_bps"] == settings.platform_fee_bps


class TestPrintResult:
    def test_partial_shows_resume_point(self, capsys) -> None:
        result = WorkflowResult(
            workflow="fund_escrow",
            job_id="job_1",
            outcome=WorkflowOutcome.PARTIAL,
            steps=[
                StepRecord("APPROVE", StepStatus.CONFIRMED, tx_hash="0xaa"),
                StepRecord("FUND", StepStatus.FAILED, error="Transaction reverted"),
            ],
            message="Transaction reverted",
            resume_step="FUND",
            data={"amount": Decimal("10")},
        )

        print_result(result)

        out = capsys.readouterr().out
        assert "tx=0xaa" in out
        assert "Resume from: FUND" in out

"""Jobs board operator CLI.

Read commands work without a key; workflow commands sign with
SIGNER_PRIVATE_KEY from the environment or .env.

Usage:
    jobs-board board --wallet 0xabc...            # jobs, escrow state, offered actions
    jobs-board resolve-agent 0xabc...
    jobs-board escrow job_123
    jobs-board payout 10.00
    jobs-board index-sync
    jobs-board manifest
    jobs-board fund job_123
    jobs-board select-winner job_123 sub_9
    jobs-board release job_123
    jobs-board refund job_123 --yes
    jobs-board mark-paid job_123 --tx-hash 0x...
    jobs-board register --name "Worker"
    jobs-board feedback job_123 90 --comment "great work"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from jobs_board.chain.reader import ChainReader
from jobs_board.chain.signer import build_signer
from jobs_board.config import get_settings
from jobs_board.domain.exceptions import JobsBoardError, ValidationError
from jobs_board.domain.money import compute_payout
from jobs_board.infrastructure.job_store import JobStoreClient
from jobs_board.infrastructure.token_store import build_token_store
from jobs_board.logging_config import get_logger, setup_logging
from jobs_board.services.agent_resolver import AgentResolver
from jobs_board.services.board_view import BoardView
from jobs_board.services.escrow_reconciler import EscrowReconciler
from jobs_board.services.manifest import build_agent_manifest
from jobs_board.services.orchestrator import TransactionOrchestrator

if TYPE_CHECKING:
    from jobs_board.config import Settings
    from jobs_board.schemas.jobs import Job
    from jobs_board.services.orchestrator import WorkflowResult
    from jobs_board.services.registration_index import RegistrationIndex

logger = get_logger("jobs_board.cli")


@dataclass
class Context:
    settings: Settings
    reader: ChainReader
    job_store: JobStoreClient
    resolver: AgentResolver
    reconciler: EscrowReconciler
    board: BoardView
    orchestrator: TransactionOrchestrator


async def _open_index(settings: Settings, reader: ChainReader) -> RegistrationIndex:
    from jobs_board.infrastructure.database.engine import init_index_db
    from jobs_board.services.registration_index import RegistrationIndex

    session_factory = await init_index_db()
    return RegistrationIndex.from_settings(reader, session_factory, settings)


async def build_context(settings: Settings) -> Context:
    reader = ChainReader.from_settings(settings)
    index = await _open_index(settings, reader) if settings.agent_lookup == "index" else None
    resolver = AgentResolver.from_settings(reader, index=index, settings=settings)
    reconciler = EscrowReconciler(
        reader,
        decimals=settings.token_decimals,
        concurrency=settings.chain_read_concurrency,
    )
    job_store = JobStoreClient.from_settings(settings)
    board = BoardView(job_store, reconciler, resolver)
    orchestrator = TransactionOrchestrator(
        reader,
        job_store,
        await build_token_store(settings),
        signer=build_signer(settings, w3=reader.w3),
        resolver=resolver,
        reconciler=reconciler,
        settings=settings,
        on_refresh=board.refresh_all,
    )
    return Context(settings, reader, job_store, resolver, reconciler, board, orchestrator)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def section(text: str) -> None:
    print(f"\n--- {text} ---\n")


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def print_result(result: WorkflowResult) -> None:
    """Pretty-print a workflow result."""
    icon = {"succeeded": "✅", "partial": "⚠️ ", "cancelled": "⏹ "}.get(result.outcome, "❌")
    print(f"  {icon} {result.workflow}: {result.outcome} — {result.message}")
    for step in result.steps:
        line = f"    {step.name:<18} {step.status}"
        if step.tx_hash:
            line += f"  tx={step.tx_hash}"
        if step.error:
            line += f"  ({step.error})"
        print(line)
    if result.resume_step:
        print(f"  Resume from: {result.resume_step}")
    if result.prompt_feedback:
        print("  Leave feedback for the winner with: jobs-board feedback <job_id> <0-100>")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
async def _find_job(ctx: Context, job_id: str) -> Job:
    for job in await ctx.board.refresh_jobs():
        if job.id == job_id:
            return job
    raise ValidationError(f"Job {job_id} not found", field="job_id")


async def cmd_board(ctx: Context, args: argparse.Namespace) -> int:
    await ctx.board.refresh_all()
    stats = ctx.board.stats
    section("Stats")
    print(
        f"  open={stats.open} completed={stats.completed} "
        f"rewards=${stats.total_rewards:.2f} paid=${stats.total_paid:.2f}"
    )
    section("Jobs")
    for view in ctx.board.job_views(args.status, args.mine, args.wallet):
        job = view.job
        badge = view.payment_badge or view.escrow_state
        actions = ", ".join(sorted(view.available_actions(args.wallet)))
        print(f"  [{job.id}] {job.title} — {job.reward} {job.currency} ({job.status}, {badge})")
        if view.awaiting_release:
            print("      awaiting release")
        print(f"      actions: {actions}")
    section("Leaderboard")
    for entry in ctx.board.leaderboard:
        agent = ctx.board.agent_for(entry.wallet)
        suffix = f"  🤖 #{agent.agent_id} {agent.reputation.display}" if agent and agent.reputation else ""
        print(f"  {entry.wallet}  ${entry.earned:.2f}  {entry.jobs_won} won{suffix}")
    return 0


async def cmd_resolve_agent(ctx: Context, args: argparse.Namespace) -> int:
    identity = await ctx.resolver.resolve(args.wallet)
    if identity is None:
        print(f"  {args.wallet} is not a registered agent")
        return 1
    print(f"  Agent #{identity.agent_id}  {identity.reputation.display if identity.reputation else ''}")
    return 0


async def cmd_escrow(ctx: Context, args: argparse.Namespace) -> int:
    record = await ctx.reconciler.read_one(args.job_id)
    if record is None:
        print(f"  Job {args.job_id} has no escrow")
        return 1
    print_json(
        {
            "job_id": record.job_id,
            "amount": str(record.amount),
            "winner": record.winner,
            "released": record.released,
            "refunded": record.refunded,
            "created_at": record.created_at,
        }
    )
    return 0


async def cmd_index_sync(ctx: Context, args: argparse.Namespace) -> int:
    index = await _open_index(ctx.settings, ctx.reader)
    new = await index.sync()
    print(f"  Indexed {new} new registrations ({await index.count()} total)")
    return 0


async def cmd_fund(ctx: Context, args: argparse.Namespace) -> int:
    result = await ctx.orchestrator.fund_escrow(await _find_job(ctx, args.job_id))
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_select_winner(ctx: Context, args: argparse.Namespace) -> int:
    job = await _find_job(ctx, args.job_id)
    submissions = await ctx.job_store.list_submissions(job.id)
    submission = next((s for s in submissions if s.id == args.submission_id), None)
    if submission is None:
        raise ValidationError(f"Submission {args.submission_id} not found", field="submission_id")
    escrow = await ctx.reconciler.read_one(job.id)
    result = await ctx.orchestrator.select_winner(
        job, submission, escrow=escrow, resume_step=args.resume_step
    )
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_release(ctx: Context, args: argparse.Namespace) -> int:
    job = await _find_job(ctx, args.job_id)
    escrow = await ctx.reconciler.read_one(job.id)
    payout = compute_payout(escrow.amount if escrow else job.reward, ctx.settings.platform_fee_bps)
    print(f"  Winner receives {payout.winner_receives} (fee {payout.fee})")
    result = await ctx.orchestrator.release_funds(
        job,
        escrow=escrow,
        resume_step="MARK_PAID" if args.tx_hash else None,
        release_tx_hash=args.tx_hash or "",
    )
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_refund(ctx: Context, args: argparse.Namespace) -> int:
    async def confirm(job: Job) -> bool:
        if args.yes:
            return True
        answer = await asyncio.to_thread(
            input, f"Refund escrow for {job.id}? This will return {ctx.settings.token_symbol} to your wallet. [y/N] "
        )
        return answer.strip().lower() in ("y", "yes")

    result = await ctx.orchestrator.refund(await _find_job(ctx, args.job_id), confirm)
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_mark_paid(ctx: Context, args: argparse.Namespace) -> int:
    job = await _find_job(ctx, args.job_id)
    result = await ctx.orchestrator.mark_paid(job, wallet=args.wallet, tx_hash=args.tx_hash)
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_register(ctx: Context, args: argparse.Namespace) -> int:
    result = await ctx.orchestrator.register_agent(args.name, args.description)
    print_result(result)
    return 0 if result.succeeded else 1


async def cmd_feedback(ctx: Context, args: argparse.Namespace) -> int:
    job = await _find_job(ctx, args.job_id)
    result = await ctx.orchestrator.give_feedback(job, args.rating, args.comment)
    print_result(result)
    return 0 if result.succeeded else 1


COMMANDS = {
    "board": cmd_board,
    "resolve-agent": cmd_resolve_agent,
    "escrow": cmd_escrow,
    "index-sync": cmd_index_sync,
    "fund": cmd_fund,
    "select-winner": cmd_select_winner,
    "release": cmd_release,
    "refund": cmd_refund,
    "mark-paid": cmd_mark_paid,
    "register": cmd_register,
    "feedback": cmd_feedback,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobs-board", description="Jobs board operator CLI")
    parser.add_argument("--log-level", default=None, help="Override APP_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    board = sub.add_parser("board", help="Show jobs, stats and leaderboard.")
    board.add_argument("--wallet", default=None, help="Viewer wallet for offered actions.")
    board.add_argument("--status", choices=["all", "open", "completed"], default="all")
    board.add_argument("--mine", action="store_true", help="Only jobs posted by --wallet.")

    resolve = sub.add_parser("resolve-agent", help="Look up a wallet's agent identity.")
    resolve.add_argument("wallet")

    escrow = sub.add_parser("escrow", help="Show the on-chain escrow of a job.")
    escrow.add_argument("job_id")

    payout = sub.add_parser("payout", help="Show the fee split for an amount.")
    payout.add_argument("amount", type=Decimal)
    payout.add_argument("--fee-bps", type=int, default=None)

    sub.add_parser("index-sync", help="Replay Registered events into the agent index.")
    sub.add_parser("manifest", help="Print the agent discovery manifest.")

    fund = sub.add_parser("fund", help="Approve (if needed) and fund a job's escrow.")
    fund.add_argument("job_id")

    select = sub.add_parser("select-winner", help="Select a winning submission.")
    select.add_argument("job_id")
    select.add_argument("submission_id")
    select.add_argument(
        "--resume-step",
        choices=["AUTHORIZE", "SELECT_OFF_CHAIN"],
        default=None,
        help="Resume point printed by a failed run; SELECT_OFF_CHAIN only resends the job store update.",
    )

    release = sub.add_parser("release", help="Release escrowed funds to the winner.")
    release.add_argument("job_id")
    release.add_argument(
        "--tx-hash",
        default=None,
        help="Hash of an already confirmed release; only the mark-paid step is sent.",
    )

    refund = sub.add_parser("refund", help="Refund a job's escrow to the poster.")
    refund.add_argument("job_id")
    refund.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")

    mark_paid = sub.add_parser("mark-paid", help="Mark a job paid off-chain.")
    mark_paid.add_argument("job_id")
    mark_paid.add_argument("--tx-hash", default="")
    mark_paid.add_argument("--wallet", default=None)

    register = sub.add_parser("register", help="Register the signer as an ERC-8004 agent.")
    register.add_argument("--name", default="")
    register.add_argument("--description", default="")

    feedback = sub.add_parser("feedback", help="Rate a job's winner (0-100).")
    feedback.add_argument("job_id")
    feedback.add_argument("rating", type=int)
    feedback.add_argument("--comment", default="")

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "manifest":
        print_json(build_agent_manifest(settings))
        return 0
    if args.command == "payout":
        fee_bps = args.fee_bps if args.fee_bps is not None else settings.platform_fee_bps
        split = compute_payout(args.amount, fee_bps)
        print(f"  Amount {split.amount}  fee {split.fee} ({split.fee_percent}%)  winner receives {split.winner_receives}")
        return 0

    ctx = await build_context(settings)
    try:
        return await COMMANDS[args.command](ctx, args)
    except JobsBoardError as exc:
        logger.error("cli.command_failed", command=args.command, error=exc.message, code=exc.code)
        print(f"  ❌ {exc.message}")
        return 1
    finally:
        await ctx.job_store.aclose()
        if settings.agent_lookup == "index" or args.command == "index-sync":
            from jobs_board.infrastructure.database.engine import close_index_db

            await close_index_db()
        if settings.token_store_backend == "redis":
            from jobs_board.infrastructure.redis_client import close_redis

            await close_redis()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(
        log_level=args.log_level or settings.app_log_level,
        json_logs=not settings.is_development,
        stream=sys.stderr,
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    raise SystemExit(main())

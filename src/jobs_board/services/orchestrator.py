"""Transaction Orchestrator — multi-step signed workflows.

Each workflow runs its steps strictly in order, driven by a state machine
that forbids illegal orderings. Steps are never retried automatically;
a confirmed step is recorded as confirmed no matter what fails after it.
Every failure is caught at the workflow boundary and returned as a
WorkflowResult with the per-step record, a short message, and a resume
point when re-running from there is safe.

Workflows:
    fund_escrow      CHECK_ALLOWANCE -> [APPROVE] -> FUND -> RECONCILE
    select_winner    AUTHORIZE -> [SELECT_ON_CHAIN] -> SELECT_OFF_CHAIN
    release_funds    RELEASE -> MARK_PAID -> RECONCILE
    refund           CONFIRM -> REFUND -> RECONCILE
    mark_paid, post_job, submit_work, register_agent, give_feedback
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

import pydantic
import structlog
from statemachine.exceptions import TransitionNotAllowed
from web3 import Web3

from jobs_board.chain.signer import classify_error
from jobs_board.config import get_settings
from jobs_board.domain.enums import ErrorKind, StepStatus, WorkflowOutcome
from jobs_board.domain.exceptions import (
    AuthorizationError,
    InvalidStateTransitionError,
    JobsBoardError,
    SignerRejectedError,
    ValidationError,
    WorkflowCancelledError,
)
from jobs_board.domain.models import ZERO_BYTES32, PosterCredentials, TxCall
from jobs_board.domain.money import compute_payout, to_units
from jobs_board.domain.state_machine import (
    FundEscrowMachine,
    RefundMachine,
    ReleaseFundsMachine,
    SelectWinnerMachine,
)
from jobs_board.logging_config import get_logger
from jobs_board.schemas.jobs import CreateJobRequest, SubmitWorkRequest
from jobs_board.services.agent_resolver import AgentResolver

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Awaitable, Callable

    from statemachine import StateMachine

    from jobs_board.chain.reader import ChainReader
    from jobs_board.config import Settings
    from jobs_board.domain.models import EscrowRecord
    from jobs_board.domain.signer_protocol import TransactionSigner, TxReceipt
    from jobs_board.infrastructure.job_store import JobStoreClient
    from jobs_board.infrastructure.token_store import PosterTokenStore
    from jobs_board.schemas.jobs import Job, Submission
    from jobs_board.services.escrow_reconciler import EscrowReconciler

    ConfirmCallback = Callable[[Job], Awaitable[bool]]
    RefreshCallback = Callable[[], Awaitable[Any]]

logger = get_logger(__name__)

REGISTRATION_TYPE = "https://eips.ethereum.org/EIPS/eip-8004#registration-v1"
FEEDBACK_TAG = "job-completed"
DESCRIPTION_MIN_LENGTH = 50


@dataclass
class StepRecord:
    name: str
    status: StepStatus = StepStatus.NOT_STARTED
    tx_hash: str | None = None
    error: str | None = None


@dataclass
class WorkflowResult:
    """What happened in one workflow run, step by step.

    Attributes:
        outcome: succeeded, failed (nothing changed), partial (some step
            with a side effect confirmed before the failure) or cancelled.
        final_state: Terminal state of the workflow machine, if it has one.
        resume_step: Step to re-run from, when that is safe.
        prompt_feedback: The poster should be asked to rate the winner.
    """

    workflow: str
    job_id: str | None
    outcome: WorkflowOutcome
    steps: list[StepRecord]
    final_state: str = ""
    error_kind: ErrorKind | None = None
    message: str = ""
    resume_step: str | None = None
    prompt_feedback: bool = False
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.outcome == WorkflowOutcome.SUCCEEDED

    @property
    def tx_hashes(self) -> dict[str, str]:
        return {step.name: step.tx_hash for step in self.steps if step.tx_hash}

    def step(self, name: str) -> StepRecord:
        for record in self.steps:
            if record.name == name:
                return record
        raise KeyError(name)


class _Run:
    """Mutable bookkeeping for a single workflow execution."""

    def __init__(
        self,
        workflow: str,
        job_id: str | None,
        step_names: list[str],
        machine: StateMachine | None = None,
        cancel: asyncio.Event | None = None,
        resume_points: dict[str, str] | None = None,
    ) -> None:
        self.workflow = workflow
        self.job_id = job_id
        self.machine = machine
        self.cancel = cancel
        self.resume_points = resume_points or {}
        self.steps = {name: StepRecord(name) for name in step_names}
        self.current_step: str | None = None
        self.side_effects = 0
        self.prompt_feedback = False
        self.data: dict[str, Any] = {}

    @property
    def state(self) -> str:
        return self.machine.status if self.machine is not None else ""

    def begin(self, step: str) -> None:
        """Enter `step`; a set cancel token stops the workflow here."""
        if self.cancel is not None and self.cancel.is_set():
            raise WorkflowCancelledError()
        self.current_step = step

    def confirm(self, step: str, tx_hash: str | None = None, side_effect: bool = False) -> None:
        record = self.steps[step]
        record.status = StepStatus.CONFIRMED
        if tx_hash:
            record.tx_hash = tx_hash
        if side_effect:
            self.side_effects += 1
        self.current_step = None

    def skip(self, step: str, reason: str | None = None) -> None:
        record = self.steps[step]
        record.status = StepStatus.SKIPPED
        record.error = reason

    def fire(self, event: str) -> None:
        if self.machine is None:
            return
        try:
            getattr(self.machine, event)()
        except TransitionNotAllowed as err:
            raise InvalidStateTransitionError(self.machine.status, event) from err

    def can_fire(self, event: str) -> bool:
        return self.machine is not None and event in self.machine.get_allowed_events()

    def result(self, outcome: WorkflowOutcome, **kwargs: Any) -> WorkflowResult:
        return WorkflowResult(
            workflow=self.workflow,
            job_id=self.job_id,
            outcome=outcome,
            steps=list(self.steps.values()),
            final_state=self.state,
            prompt_feedback=self.prompt_feedback,
            data=self.data,
            **kwargs,
        )


class TransactionOrchestrator:
    """Runs the board's user workflows against the chain and the job store."""

    def __init__(
        self,
        reader: ChainReader,
        job_store: JobStoreClient,
        token_store: PosterTokenStore,
        signer: TransactionSigner | None = None,
        resolver: AgentResolver | None = None,
        reconciler: EscrowReconciler | None = None,
        settings: Settings | None = None,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._reader = reader
        self._job_store = job_store
        self._token_store = token_store
        self._signer = signer
        self._settings = settings or get_settings()
        self._resolver = resolver or AgentResolver(
            reader, concurrency=self._settings.chain_read_concurrency
        )
        self._reconciler = reconciler
        self._on_refresh = on_refresh

    @property
    def signer(self) -> TransactionSigner | None:
        return self._signer

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def _wallet(self, wallet: str | None) -> str | None:
        if wallet:
            return wallet
        return self._signer.address if self._signer is not None else None

    async def poster_credentials(self, job_id: str, wallet: str | None = None) -> PosterCredentials:
        """Stored poster token for the job plus the connected wallet."""
        token = await self._token_store.get(job_id)
        return PosterCredentials(token=token, wallet=self._wallet(wallet))

    async def _require_credentials(self, job_id: str, wallet: str | None) -> PosterCredentials:
        credentials = await self.poster_credentials(job_id, wallet)
        if credentials.is_empty:
            raise AuthorizationError()
        return credentials

    def _require_signer(self) -> TransactionSigner:
        if self._signer is None:
            raise SignerRejectedError("Connect wallet first")
        return self._signer

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------

    async def fund_escrow(self, job: Job, cancel: asyncio.Event | None = None) -> WorkflowResult:
        """Approve the escrow for the reward (only if needed), then fund it."""
        run = _Run(
            "fund_escrow",
            job.id,
            ["CHECK_ALLOWANCE", "APPROVE", "FUND", "RECONCILE"],
            machine=FundEscrowMachine(),
            cancel=cancel,
            resume_points={"CHECK_ALLOWANCE": "CHECK_ALLOWANCE", "APPROVE": "CHECK_ALLOWANCE", "FUND": "FUND"},
        )

        async def body() -> str:
            if not job.is_open:
                raise ValidationError("Only open jobs can be funded", field="status")
            signer = self._require_signer()
            amount = to_units(job.reward, self._settings.token_decimals)
            if amount <= 0:
                raise ValidationError("Reward must be greater than zero", field="reward")
            run.data["amount_units"] = amount
            escrow_address = self._reader.escrow.address

            run.begin("CHECK_ALLOWANCE")
            allowance = await self._reader.get_allowance(signer.address, escrow_address)
            run.data["allowance_units"] = allowance
            run.confirm("CHECK_ALLOWANCE")

            if allowance < amount:
                run.fire("needs_approval")
                await self._transact(
                    run,
                    "APPROVE",
                    TxCall(
                        "approve",
                        self._reader.token.functions.approve(escrow_address, amount),
                        description=f"Approve {job.reward} {self._settings.token_symbol}",
                    ),
                )
                run.fire("approved")
            else:
                run.skip("APPROVE", "allowance sufficient")
                run.fire("allowance_sufficient")

            await self._transact(
                run,
                "FUND",
                TxCall(
                    "fundJob",
                    self._reader.escrow.functions.fundJob(job.id, amount),
                    description=f"Fund escrow for job {job.id}",
                ),
            )
            run.fire("funded")
            await self._reconcile(run, job.id)
            return "Escrow funded"

        return await self._execute(run, body)

    async def select_winner(
        self,
        job: Job,
        submission: Submission,
        escrow: EscrowRecord | None = None,
        wallet: str | None = None,
        cancel: asyncio.Event | None = None,
        resume_step: str | None = None,
    ) -> WorkflowResult:
        """Select the winner on-chain (funded escrow only), then in the job store.

        `resume_step="SELECT_OFF_CHAIN"` re-sends only the job store update
        after an on-chain selection already confirmed.
        """
        if resume_step == "AUTHORIZE":
            resume_step = None
        valid_resume = resume_step in (None, "SELECT_OFF_CHAIN")
        run = _Run(
            "select_winner",
            job.id,
            ["AUTHORIZE", "SELECT_ON_CHAIN", "SELECT_OFF_CHAIN"],
            machine=SelectWinnerMachine(current_status=resume_step if valid_resume else None),
            cancel=cancel,
            resume_points={"SELECT_ON_CHAIN": "AUTHORIZE", "SELECT_OFF_CHAIN": "SELECT_OFF_CHAIN"},
        )

        async def body() -> str:
            if not valid_resume:
                raise ValidationError(f"Cannot resume select_winner at {resume_step}", field="resume_step")
            run.begin("AUTHORIZE")
            if submission.job_id and submission.job_id != job.id:
                raise ValidationError("Submission belongs to another job", field="submission_id")
            credentials = await self._require_credentials(job.id, wallet)
            on_chain = (
                escrow is not None
                and escrow.funded
                and not escrow.released
                and self._signer is not None
            )
            run.confirm("AUTHORIZE")

            if resume_step == "SELECT_OFF_CHAIN":
                run.skip("SELECT_ON_CHAIN", "resumed")
            elif on_chain:
                try:
                    worker = Web3.to_checksum_address(submission.worker_wallet)
                except ValueError as err:
                    raise ValidationError("Invalid worker wallet", field="worker_wallet") from err
                run.fire("authorized_funded")
                await self._transact(
                    run,
                    "SELECT_ON_CHAIN",
                    TxCall("selectWinner", self._reader.escrow.functions.selectWinner(job.id, worker)),
                )
                run.fire("selected_on_chain")
            else:
                run.skip("SELECT_ON_CHAIN", "no funded escrow" if self._signer else "no signer")
                run.fire("authorized")

            run.begin("SELECT_OFF_CHAIN")
            await self._job_store.select_winner(job.id, submission.id, credentials)
            run.confirm("SELECT_OFF_CHAIN", side_effect=True)
            run.fire("selected")
            return "Winner selected"

        return await self._execute(run, body)

    async def release_funds(
        self,
        job: Job,
        escrow: EscrowRecord | None = None,
        wallet: str | None = None,
        cancel: asyncio.Event | None = None,
        resume_step: str | None = None,
        release_tx_hash: str = "",
    ) -> WorkflowResult:
        """Release escrowed funds to the winner, then notify the job store.

        `resume_step="MARK_PAID"` (with the confirmed `release_tx_hash`)
        re-sends only the notification.
        """
        if resume_step == "RELEASE":
            resume_step = None
        valid_resume = resume_step in (None, "MARK_PAID")
        run = _Run(
            "release_funds",
            job.id,
            ["RELEASE", "MARK_PAID", "RECONCILE"],
            machine=ReleaseFundsMachine(current_status=resume_step if valid_resume else None),
            cancel=cancel,
            resume_points={"RELEASE": "RELEASE", "MARK_PAID": "MARK_PAID"},
        )
        amount = escrow.amount if escrow is not None else job.reward
        run.data["payout"] = compute_payout(amount, self._settings.platform_fee_bps)

        async def body() -> str:
            if not valid_resume:
                raise ValidationError(f"Cannot resume release_funds at {resume_step}", field="resume_step")
            credentials = await self._require_credentials(job.id, wallet)

            if resume_step == "MARK_PAID":
                tx_hash = release_tx_hash
                run.skip("RELEASE", "resumed")
                run.steps["RELEASE"].tx_hash = tx_hash or None
            else:
                receipt = await self._transact(
                    run,
                    "RELEASE",
                    TxCall(
                        "releaseFunds",
                        self._reader.escrow.functions.releaseFunds(job.id),
                        description=f"Release {run.data['payout'].winner_receives} to winner",
                    ),
                )
                tx_hash = receipt.tx_hash
                run.fire("released")

            run.begin("MARK_PAID")
            await self._job_store.mark_paid(job.id, credentials, tx_hash=tx_hash)
            run.confirm("MARK_PAID", side_effect=True)
            run.fire("marked_paid")
            await self._reconcile(run, job.id)
            run.prompt_feedback = True
            return "Payment released"

        return await self._execute(run, body)

    async def refund(
        self,
        job: Job,
        confirm: ConfirmCallback,
        cancel: asyncio.Event | None = None,
    ) -> WorkflowResult:
        """Refund the escrow to the poster after an explicit confirmation."""
        run = _Run(
            "refund",
            job.id,
            ["CONFIRM", "REFUND", "RECONCILE"],
            machine=RefundMachine(),
            cancel=cancel,
            resume_points={"REFUND": "REFUND"},
        )

        async def body() -> str:
            run.current_step = "CONFIRM"
            if not await confirm(job):
                run.skip("CONFIRM", "declined")
                run.fire("declined")
                raise WorkflowCancelledError("Refund cancelled")
            run.confirm("CONFIRM")
            run.fire("confirmed")

            await self._transact(
                run,
                "REFUND",
                TxCall("refundJob", self._reader.escrow.functions.refundJob(job.id)),
            )
            run.fire("refunded")
            await self._reconcile(run, job.id)
            return "Escrow refunded"

        return await self._execute(run, body)

    async def mark_paid(
        self,
        job: Job,
        wallet: str | None = None,
        tx_hash: str = "",
    ) -> WorkflowResult:
        """Record an off-chain payment in the job store."""
        run = _Run("mark_paid", job.id, ["MARK_PAID"], resume_points={"MARK_PAID": "MARK_PAID"})

        async def body() -> str:
            credentials = await self._require_credentials(job.id, wallet)
            run.begin("MARK_PAID")
            await self._job_store.mark_paid(job.id, credentials, tx_hash=tx_hash.strip())
            run.confirm("MARK_PAID", side_effect=True)
            run.prompt_feedback = True
            return "Payment marked"

        return await self._execute(run, body)

    async def post_job(
        self,
        title: str,
        description: str,
        reward: Decimal | str | float | None,
        wallet: str | None = None,
    ) -> WorkflowResult:
        """Validate and create a job; the returned poster token is stored."""
        run = _Run("post_job", None, ["VALIDATE", "CREATE", "SAVE_TOKEN"])

        async def body() -> str:
            run.begin("VALIDATE")
            request = self._validate_job(title, description, reward, self._wallet(wallet))
            run.confirm("VALIDATE")

            run.begin("CREATE")
            created = await self._job_store.create_job(request)
            run.job_id = created.id
            run.data["job_id"] = created.id
            run.confirm("CREATE", side_effect=True)

            run.begin("SAVE_TOKEN")
            await self._token_store.put(created.id, created.poster_token)
            run.confirm("SAVE_TOKEN")
            return "Job posted"

        return await self._execute(run, body)

    async def submit_work(self, job: Job, content: str, wallet: str | None = None) -> WorkflowResult:
        run = _Run("submit_work", job.id, ["VALIDATE", "SUBMIT"])

        async def body() -> str:
            run.begin("VALIDATE")
            worker = self._wallet(wallet)
            if not worker:
                raise ValidationError("Connect wallet first", field="worker_wallet")
            if not content or not content.strip():
                raise ValidationError("Enter your work", field="content")
            if not job.is_open:
                raise ValidationError("Job is no longer open", field="status")
            request = self._build(SubmitWorkRequest, worker_wallet=worker, content=content)
            run.confirm("VALIDATE")

            run.begin("SUBMIT")
            await self._job_store.submit_work(job.id, request)
            run.confirm("SUBMIT", side_effect=True)
            return "Work submitted"

        return await self._execute(run, body)

    async def register_agent(
        self,
        name: str = "",
        description: str = "",
        cancel: asyncio.Event | None = None,
    ) -> WorkflowResult:
        """Mint an ERC-8004 identity for the signer's wallet."""
        run = _Run("register_agent", None, ["REGISTER"], cancel=cancel)

        async def body() -> str:
            signer = self._require_signer()
            registration = build_registration(
                signer.address,
                name=name,
                description=description,
                endpoint=self._settings.public_base_url,
            )
            agent_uri = encode_data_uri(
                json.dumps(registration, separators=(",", ":")), "application/json"
            )
            run.data["registration"] = registration
            run.data["agent_uri"] = agent_uri
            await self._transact(
                run,
                "REGISTER",
                TxCall("register", self._reader.identity.functions.register(agent_uri)),
            )
            return "Agent registered"

        return await self._execute(run, body)

    async def give_feedback(
        self,
        job: Job,
        rating: int,
        comment: str = "",
        cancel: asyncio.Event | None = None,
    ) -> WorkflowResult:
        """Rate the job's winner in the reputation registry."""
        run = _Run("give_feedback", job.id, ["RESOLVE_AGENT", "FEEDBACK"], cancel=cancel)

        async def body() -> str:
            if isinstance(rating, bool) or not isinstance(rating, int) or not 0 <= rating <= 100:
                raise ValidationError("Rating must be an integer from 0 to 100", field="rating")
            if not job.winner_wallet:
                raise ValidationError("Job has no winner yet", field="winner_wallet")
            self._require_signer()

            run.begin("RESOLVE_AGENT")
            agent_id = await self._resolver.find_agent_id(job.winner_wallet)
            if agent_id is None:
                raise ValidationError("Winner has not registered as an agent yet")
            run.data["agent_id"] = agent_id
            run.confirm("RESOLVE_AGENT")

            comment_text = comment.strip()
            feedback_uri = encode_data_uri(comment_text, "text/plain") if comment_text else ""
            await self._transact(
                run,
                "FEEDBACK",
                TxCall(
                    "giveFeedback",
                    self._reader.reputation.functions.giveFeedback(
                        agent_id, rating, 0, FEEDBACK_TAG, job.id, "", feedback_uri, ZERO_BYTES32
                    ),
                ),
            )
            return "Feedback submitted"

        return await self._execute(run, body)

    # ------------------------------------------------------------------
    # Step helpers
    # ------------------------------------------------------------------

    async def _transact(self, run: _Run, step: str, call: TxCall) -> TxReceipt:
        """Submit one contract write and wait for its confirmation."""
        run.begin(step)
        signer = self._require_signer()
        logger.info("workflow.step_submitting", step=step, call=call.name)
        tx_hash = await signer.send(call)
        run.steps[step].tx_hash = tx_hash
        receipt = await signer.wait_for_receipt(tx_hash, self._settings.confirmation_timeout_seconds)
        run.confirm(step, tx_hash=tx_hash, side_effect=True)
        logger.info(
            "workflow.step_confirmed",
            step=step,
            tx_hash=tx_hash,
            block_number=receipt.block_number,
        )
        return receipt

    async def _reconcile(self, run: _Run, job_id: str) -> None:
        """Re-read the escrow; a failed read never fails the workflow."""
        run.current_step = "RECONCILE"
        if self._reconciler is None:
            run.skip("RECONCILE", "no reconciler")
        else:
            try:
                run.data["escrow"] = await self._reconciler.read_one(job_id)
                run.confirm("RECONCILE")
            except JobsBoardError as exc:
                logger.warning("workflow.reconcile_failed", error=exc.message)
                run.skip("RECONCILE", exc.message)
        run.current_step = None
        run.fire("reconciled")

    async def _refresh(self) -> None:
        if self._on_refresh is None:
            return
        try:
            await self._on_refresh()
        except Exception as exc:
            logger.warning("workflow.refresh_failed", error=str(exc))

    async def _execute(self, run: _Run, body: Callable[[], Awaitable[str]]) -> WorkflowResult:
        with structlog.contextvars.bound_contextvars(workflow=run.workflow, job_id=run.job_id):
            logger.info("workflow.started")
            try:
                message = await body()
            except Exception as exc:
                result = self._fail(run, exc)
            else:
                result = run.result(WorkflowOutcome.SUCCEEDED, message=message)

            if run.side_effects:
                await self._refresh()

            logger.info(
                "workflow.finished",
                outcome=result.outcome,
                final_state=result.final_state,
                tx_hashes=result.tx_hashes,
            )
            return result

    def _fail(self, run: _Run, exc: Exception) -> WorkflowResult:
        if isinstance(exc, JobsBoardError):
            error = exc
        else:
            logger.exception("workflow.unexpected_error", step=run.current_step)
            error = classify_error(exc)

        if isinstance(error, WorkflowCancelledError):
            if run.can_fire("cancel"):
                run.fire("cancel")
            logger.info("workflow.cancelled", step=run.current_step)
            return run.result(
                WorkflowOutcome.CANCELLED,
                error_kind=error.kind,
                message=error.message,
            )

        failed_step = run.current_step
        failed_state = run.state
        in_flight = False
        if failed_step is not None:
            record = run.steps[failed_step]
            if getattr(error, "tx_hash", None):
                record.tx_hash = error.tx_hash
            # A submitted transaction that did not revert may still be mined.
            in_flight = bool(record.tx_hash) and error.kind != ErrorKind.REVERTED
            record.status = StepStatus.UNCONFIRMED if in_flight else StepStatus.FAILED
            record.error = error.message
        if run.can_fire("fail"):
            run.fire("fail")

        resume_step = None
        if not in_flight and error.kind not in (ErrorKind.VALIDATION, ErrorKind.AUTHORIZATION):
            resume_step = run.resume_points.get(failed_state or failed_step or "")

        if run.side_effects or in_flight:
            outcome = WorkflowOutcome.PARTIAL
        else:
            outcome = WorkflowOutcome.FAILED
        logger.warning(
            "workflow.failed",
            step=failed_step,
            kind=error.kind,
            error=error.message,
            outcome=outcome,
        )
        return run.result(
            outcome,
            error_kind=error.kind,
            message=error.message,
            resume_step=resume_step,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_job(
        self,
        title: str,
        description: str,
        reward: Decimal | str | float | None,
        wallet: str | None,
    ) -> CreateJobRequest:
        if not wallet:
            raise ValidationError("Connect wallet first", field="poster_wallet")
        title = (title or "").strip()
        description = (description or "").strip()
        try:
            amount = Decimal(str(reward)) if reward not in (None, "") else Decimal(0)
        except InvalidOperation:
            amount = Decimal(0)
        if not title or not description or not amount.is_finite() or amount <= 0:
            raise ValidationError("Fill all fields")
        if len(description) < DESCRIPTION_MIN_LENGTH:
            raise ValidationError(
                f"Description needs {DESCRIPTION_MIN_LENGTH}+ characters", field="description"
            )
        return self._build(
            CreateJobRequest,
            title=title,
            description=description,
            reward=amount,
            currency=self._settings.token_symbol,
            poster_wallet=wallet,
        )

    @staticmethod
    def _build(model: type[pydantic.BaseModel], **values: Any) -> Any:
        try:
            return model(**values)
        except pydantic.ValidationError as err:
            first = err.errors()[0]
            field_name = ".".join(str(part) for part in first.get("loc", ()))
            raise ValidationError(f"{field_name}: {first['msg']}", field=field_name or None) from err


def encode_data_uri(text: str, media_type: str) -> str:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"data:{media_type};base64,{encoded}"


def build_registration(
    wallet: str,
    name: str = "",
    description: str = "",
    endpoint: str = "",
) -> dict[str, Any]:
    """ERC-8004 registration file for a worker agent."""
    return {
        "type": REGISTRATION_TYPE,
        "name": name.strip() or f"Agent {wallet[:8]}",
        "description": description.strip() or "Nova Jobs Board Worker",
        "image": f"https://api.dicebear.com/7.x/identicon/svg?seed={wallet}",
        "services": [{"name": "web", "endpoint": endpoint}],
        "registrations": [],
        "supportedTrust": ["reputation"],
    }

"""
Transaction Lifecycle.

Drives a state-changing contract invocation through
BUILDING -> SIMULATING -> ASSEMBLING -> SIGNING -> SUBMITTING -> POLLING
and ends in SUCCESS, FAILED or TIMEOUT.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from loguru import logger
from stellar_sdk import Keypair, TransactionBuilder, TransactionEnvelope, xdr

from ecostellar.utils.security import mask_tx_hash

from .arguments import ContractArg, encode_args
from .config import GatewayConfig
from .errors import ErrorCode, make_error
from .models import (
    PENDING_STATUSES,
    LifecycleState,
    SimulationResult,
    TransactionOutcome,
    status_name,
)

SleepFunc = Callable[[float], Awaitable[Any]]


def extract_return_value(response: Any) -> xdr.SCVal | None:
    """
    Decode the contract return value from a getTransaction response.

    Args:
        response: GetTransactionResponse with result_meta_xdr

    Returns:
        SCVal or None if the meta carries no soroban return value
    """
    meta_xdr = getattr(response, "result_meta_xdr", None)
    if not meta_xdr:
        return None

    meta = xdr.TransactionMeta.from_xdr(meta_xdr)
    for version in ("v4", "v3"):
        body = getattr(meta, version, None)
        soroban_meta = getattr(body, "soroban_meta", None) if body else None
        if soroban_meta is not None:
            return soroban_meta.return_value
    return None


class TransactionLifecycle:
    """
    One contract invocation against a Soroban RPC server.

    Created per call; holds no state shared with other invocations.

    Features:
    - Envelope building with a single invoke-contract operation
    - Simulation without submission (also used by read-only queries)
    - Footprint assembly, local signing, submission
    - Bounded status polling with an injectable sleep
    """

    def __init__(
        self,
        server: Any,
        keypair: Keypair,
        config: GatewayConfig,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """
        Initialize lifecycle.

        Args:
            server: SorobanServerAsync (or a stub with the same coroutines)
            keypair: Operator keypair, source and signer of the envelope
            config: Gateway configuration (fee, timeout, polling bounds)
            sleep: Awaitable used between polls
        """
        self.server = server
        self.keypair = keypair
        self.config = config
        self._sleep = sleep
        self.state = LifecycleState.BUILDING
        self.history: list[LifecycleState] = []

    def _enter(self, state: LifecycleState, method: str) -> None:
        self.state = state
        self.history.append(state)
        logger.debug(f"[{method}] -> {state.value}")

    async def build(
        self,
        contract_id: str,
        method: str,
        args: Sequence[ContractArg],
    ) -> TransactionEnvelope:
        """Load the operator account and build an unsigned envelope."""
        self._enter(LifecycleState.BUILDING, method)
        source = await self.server.load_account(self.keypair.public_key)

        return (
            TransactionBuilder(
                source_account=source,
                network_passphrase=self.config.network_passphrase,
                base_fee=self.config.base_fee,
            )
            .set_timeout(self.config.tx_timeout)
            .append_invoke_contract_function_op(
                contract_id=contract_id,
                function_name=method,
                parameters=encode_args(args),
            )
            .build()
        )

    async def simulate(
        self,
        envelope: TransactionEnvelope,
        method: str,
    ) -> tuple[SimulationResult, Any]:
        """
        Simulate the envelope without submitting it.

        Returns:
            Tuple of (SimulationResult, raw simulation response)
        """
        self._enter(LifecycleState.SIMULATING, method)
        response = await self.server.simulate_transaction(envelope)

        if response.error:
            return (
                SimulationResult(
                    success=False,
                    error=str(response.error),
                    latest_ledger=getattr(response, "latest_ledger", None),
                ),
                response,
            )

        result = None
        if response.results and response.results[0].xdr:
            result = xdr.SCVal.from_xdr(response.results[0].xdr)

        return (
            SimulationResult(
                success=True,
                result=result,
                min_resource_fee=getattr(response, "min_resource_fee", None),
                latest_ledger=getattr(response, "latest_ledger", None),
            ),
            response,
        )

    async def run(
        self,
        contract_id: str,
        method: str,
        args: Sequence[ContractArg],
    ) -> dict[str, Any]:
        """
        Execute the full invocation lifecycle.

        Args:
            contract_id: Contract address (C...)
            method: Contract function name
            args: Typed arguments, in order

        Returns:
            Outcome dict on success, standardized error otherwise
            (SIMULATION_FAILED, TX_FAILED, TIMEOUT, INVOKE_FAILED)
        """
        try:
            envelope = await self.build(contract_id, method, args)

            simulation, raw_simulation = await self.simulate(envelope, method)
            if not simulation.success:
                # Logical rejection: resubmitting cannot fix it
                self._enter(LifecycleState.FAILED, method)
                logger.warning(f"Simulation failed for {method}: {simulation.error}")
                return make_error(
                    ErrorCode.SIMULATION_FAILED,
                    f"Simulation failed for {method}",
                    raw_simulation,
                )

            self._enter(LifecycleState.ASSEMBLING, method)
            prepared = await self.server.prepare_transaction(envelope, raw_simulation)

            self._enter(LifecycleState.SIGNING, method)
            prepared.sign(self.keypair)

            self._enter(LifecycleState.SUBMITTING, method)
            sent = await self.server.send_transaction(prepared)
            tx_hash = sent.hash

            if status_name(sent.status) == "ERROR":
                self._enter(LifecycleState.FAILED, method)
                logger.error(
                    f"Transaction {mask_tx_hash(tx_hash)} rejected on submission ({method})"
                )
                return make_error(
                    ErrorCode.TX_FAILED,
                    f"Transaction {method} failed",
                    {
                        "hash": tx_hash,
                        "status": status_name(sent.status),
                        "error_result_xdr": getattr(sent, "error_result_xdr", None),
                    },
                )

            logger.info(f"Transaction sent! Method: {method}, hash: {mask_tx_hash(tx_hash)}")

            return await self.poll(tx_hash, method)

        except Exception as e:
            logger.error(f"Invocation of {method} failed in state {self.state.value}: {e}")
            return make_error(
                ErrorCode.INVOKE_FAILED,
                f"Failed to invoke contract method: {method}",
                e,
            )

    async def poll(self, tx_hash: str, method: str) -> dict[str, Any]:
        """
        Poll transaction status until it leaves PENDING/NOT_FOUND.

        Makes at most ``max_poll_retries`` status requests, sleeping
        ``poll_interval`` seconds between consecutive requests.

        Args:
            tx_hash: Hash returned by submission
            method: Contract function name (for results and logs)

        Returns:
            Outcome dict, TX_FAILED or TIMEOUT error
        """
        self._enter(LifecycleState.POLLING, method)

        response = None
        for attempt in range(self.config.max_poll_retries):
            if attempt > 0:
                await self._sleep(self.config.poll_interval)
            response = await self.server.get_transaction(tx_hash)
            if status_name(response.status) not in PENDING_STATUSES:
                break
        else:
            # IMPORTANT: timeout does NOT mean the transaction failed,
            # it may still land in a later ledger
            self._enter(LifecycleState.TIMEOUT, method)
            logger.warning(
                f"Transaction {mask_tx_hash(tx_hash)} still pending after "
                f"{self.config.max_poll_retries} polls - check status later"
            )
            return make_error(
                ErrorCode.TIMEOUT,
                f"Transaction {method} timed out after {self.config.max_poll_retries} retries",
                tx_hash,
            )

        status = status_name(response.status)
        if status != "SUCCESS":
            self._enter(LifecycleState.FAILED, method)
            logger.error(f"Transaction {mask_tx_hash(tx_hash)} finished with status {status}")
            return make_error(
                ErrorCode.TX_FAILED,
                f"Transaction {method} failed",
                response,
            )

        self._enter(LifecycleState.SUCCESS, method)
        try:
            return_value = extract_return_value(response)
        except Exception as e:
            logger.warning(f"Could not decode return value of {method}: {e}")
            return_value = None

        outcome = TransactionOutcome(
            hash=tx_hash,
            status=LifecycleState.SUCCESS,
            method=method,
            ledger=getattr(response, "ledger", None),
            return_value=return_value,
        )
        logger.success(
            f"Transaction confirmed!\n"
            f"  Method: {method}\n"
            f"  TX: {mask_tx_hash(tx_hash)}\n"
            f"  Ledger: {outcome.ledger}"
        )
        return outcome.to_result()

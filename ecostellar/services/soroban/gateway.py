"""
Contract Gateway - Main Service Class.

Mode-transparent façade over the EcoStellar Soroban contracts:
- ECO token (mint, balance)
- Game rewards (record_game_session)
- Tree NFT (mint, get_player_trees, get_tree_data, balance_of)

Every public operation returns ``{"success": True, ...}`` or a
standardized error dict; expected failures never raise.
"""

import asyncio
from collections.abc import Callable, Mapping, Sequence
from decimal import ROUND_DOWN, Decimal
from typing import Any

from loguru import logger
from stellar_sdk import Address, Keypair, scval

from ecostellar.config.constants import (
    DEFAULT_EXPLORER_BASE,
    DEFAULT_GAME_TYPE,
    EXPLORER_NETWORK_PATHS,
    STROOPS_PER_TOKEN,
)
from ecostellar.utils.security import mask_address, mask_tx_hash

from . import arguments as arg
from .arguments import ContractArg
from .config import GatewayConfig
from .errors import ErrorCode, GatewayNotReadyError, make_error
from .lifecycle import SleepFunc, TransactionLifecycle
from .mock import MockResponses, fallback_reward
from .models import TreeMetadata, native_to_plain, status_name
from .server import create_soroban_server

# Contract function names
TOKEN_MINT = "mint"
TOKEN_BALANCE = "balance"
REWARDS_RECORD_SESSION = "record_game_session"
NFT_MINT = "mint"
NFT_PLAYER_TREES = "get_player_trees"
NFT_TREE_DATA = "get_tree_data"
NFT_BALANCE_OF = "balance_of"


def to_stroops(amount: int | Decimal | str) -> int:
    """Convert a human-facing token amount to the 7-decimal fixed point."""
    scaled = Decimal(str(amount)) * STROOPS_PER_TOKEN
    return int(scaled.to_integral_value(ROUND_DOWN))


def from_stroops(raw: int) -> Decimal:
    """Convert a 7-decimal fixed-point integer to a token amount."""
    return Decimal(int(raw)) / Decimal(STROOPS_PER_TOKEN)


class ContractGateway:
    """
    Soroban contract gateway.

    Orchestrates:
    - Mock / live mode selection (fixed at construction)
    - Lazy RPC client and operator keypair initialization
    - Read-only queries (simulation only)
    - State-changing invocations (TransactionLifecycle)
    - Contract-specific adapters and explorer links
    """

    def __init__(
        self,
        config: GatewayConfig,
        server_factory: Callable[[str], Any] = create_soroban_server,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize contract gateway.

        Args:
            config: Immutable gateway configuration
            server_factory: Builds the RPC client from the RPC URL
            sleep: Awaitable used between transaction status polls
        """
        self.config = config
        self._server_factory = server_factory
        self._sleep = sleep

        self._mock_mode = not config.is_complete
        self._initialized = False
        self._init_lock = asyncio.Lock()

        # Created by initialize(), read-only afterwards
        self.server: Any = None
        self.keypair: Keypair | None = None

        self._mock = MockResponses(self.explorer_link)

        if self._mock_mode:
            logger.warning(
                "ContractGateway: missing configuration "
                f"({', '.join(config.missing_keys)}). Enabling mock mode."
            )

        logger.info(
            "ContractGateway created (not yet initialized)\n"
            f"  Network: {config.network}\n"
            f"  RPC: {config.rpc_url}\n"
            f"  Mock mode: {self._mock_mode}"
        )

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    @property
    def initialized(self) -> bool:
        return self._initialized

    # === Initialization ===

    async def initialize(self) -> dict[str, Any]:
        """
        Create the RPC client and load the operator keypair.

        Idempotent: network setup happens at most once, concurrent callers
        wait for the first one.

        Returns:
            Dict with success (and network details) or INIT_FAILED error
        """
        async with self._init_lock:
            if self._initialized:
                return {"success": True, "mock": self._mock_mode, "message": "Already initialized"}

            if self._mock_mode:
                self._initialized = True
                logger.info("ContractGateway initialized in MOCK MODE")
                return {"success": True, "mock": True, "message": "Mock mode enabled"}

            try:
                keypair = Keypair.from_secret(self.config.operator_secret)
                server = self._server_factory(self.config.rpc_url)
            except Exception as e:
                logger.error(f"ContractGateway initialization failed: {e}")
                return make_error(
                    ErrorCode.INIT_FAILED,
                    "Failed to initialize Stellar connection",
                    e,
                )

            # Best-effort liveness probe
            try:
                await server.get_health()
                logger.info(f"Connected to Stellar {self.config.network} network")
            except asyncio.CancelledError:
                # Client was never published, release its session here
                await server.close()
                raise
            except Exception as e:
                logger.warning(f"Could not verify RPC health, continuing: {e}")

            self.server = server
            self.keypair = keypair
            self._initialized = True

            logger.success(
                f"ContractGateway initialized, operator {mask_address(keypair.public_key)}"
            )
            return {
                "success": True,
                "network": self.config.network,
                "operator_public_key": keypair.public_key,
                "contracts": self.config.contracts,
            }

    async def close(self) -> None:
        """Release the RPC client's HTTP session."""
        if self.server is None:
            return
        server, self.server = self.server, None
        self._initialized = False
        await server.close()
        logger.info("ContractGateway closed")

    async def _ensure_ready(self) -> None:
        if self._initialized:
            return
        result = await self.initialize()
        if not result["success"]:
            raise GatewayNotReadyError(result["message"])

    def _lifecycle(self) -> TransactionLifecycle:
        return TransactionLifecycle(
            server=self.server,
            keypair=self.keypair,
            config=self.config,
            sleep=self._sleep,
        )

    # === Generic contract calls ===

    async def query(
        self,
        contract_id: str,
        method: str,
        args: Sequence[ContractArg] = (),
    ) -> dict[str, Any]:
        """
        Read-only contract call (simulation, no submission).

        Args:
            contract_id: Contract address
            method: Contract function name
            args: Typed arguments

        Returns:
            Dict with success and raw SCVal ``result``,
            or SIMULATION_FAILED / CALL_FAILED error
        """
        if self._mock_mode:
            return self._mock.query()

        try:
            await self._ensure_ready()
            lifecycle = self._lifecycle()
            envelope = await lifecycle.build(contract_id, method, args)
            simulation, raw_simulation = await lifecycle.simulate(envelope, method)

            if not simulation.success:
                logger.warning(f"Query simulation failed for {method}: {simulation.error}")
                return make_error(
                    ErrorCode.SIMULATION_FAILED,
                    f"Contract simulation failed: {method}",
                    raw_simulation,
                )

            return {"success": True, "result": simulation.result}

        except Exception as e:
            logger.error(f"Query {method} failed: {e}")
            return make_error(
                ErrorCode.CALL_FAILED,
                f"Failed to call contract method: {method}",
                e,
            )

    async def invoke(
        self,
        contract_id: str,
        method: str,
        args: Sequence[ContractArg] = (),
    ) -> dict[str, Any]:
        """
        State-changing contract call.

        Args:
            contract_id: Contract address
            method: Contract function name
            args: Typed arguments

        Returns:
            Dict with success, hash, status, ledger, return_value, method,
            or SIMULATION_FAILED / TX_FAILED / TIMEOUT / INVOKE_FAILED error
        """
        if self._mock_mode:
            return self._mock.invoke(method)

        try:
            await self._ensure_ready()
        except Exception as e:
            logger.error(f"Invoke {method} failed before submission: {e}")
            return make_error(
                ErrorCode.INVOKE_FAILED,
                f"Failed to invoke contract method: {method}",
                e,
            )

        return await self._lifecycle().run(contract_id, method, args)

    # === ECO token ===

    async def mint_fungible(
        self,
        player_address: str,
        amount: int | Decimal,
    ) -> dict[str, Any]:
        """
        Mint ECO tokens to a player.

        Contract method: mint(to: Address, amount: i128)

        Args:
            player_address: Recipient address
            amount: Whole-token amount (scaled by 10^7 on-chain)

        Returns:
            Dict with success, tx_hash, tokens_minted, ledger, explorer_link
        """
        if self._mock_mode:
            return self._mock.mint_fungible(amount)

        try:
            self._require_address(player_address)
            amount_stroops = to_stroops(amount)
            if amount_stroops <= 0:
                raise ValueError(f"Mint amount must be positive, got {amount}")

            logger.info(
                f"Minting {amount} ECO to {mask_address(player_address)}\n"
                f"  Amount (stroops): {amount_stroops}"
            )
            res = await self.invoke(
                self.config.token_contract,
                TOKEN_MINT,
                [arg.address(player_address), arg.int128(amount_stroops)],
            )
            if not res["success"]:
                return res

            return {
                "success": True,
                "tx_hash": res["hash"],
                "tokens_minted": amount,
                "ledger": res["ledger"],
                "explorer_link": self.explorer_link(res["hash"]),
            }
        except Exception as e:
            logger.error(f"mint_fungible error: {e}")
            return make_error(ErrorCode.MINT_FAILED, "Failed to mint ECO tokens", e)

    async def get_fungible_balance(self, address: str) -> dict[str, Any]:
        """
        Get ECO token balance.

        Contract method: balance(address: Address) -> i128

        Returns:
            Dict with success, balance (Decimal tokens), balance_raw (stroops)
        """
        if self._mock_mode:
            return self._mock.fungible_balance()

        try:
            self._require_address(address)
            res = await self.query(
                self.config.token_contract,
                TOKEN_BALANCE,
                [arg.address(address)],
            )
            if not res["success"]:
                return res

            raw = scval.to_native(res["result"]) if res["result"] is not None else 0
            return {
                "success": True,
                "balance": from_stroops(raw),
                "balance_raw": int(raw),
            }
        except Exception as e:
            logger.error(f"get_fungible_balance error: {e}")
            return make_error(ErrorCode.BALANCE_FAILED, "Failed to fetch token balance", e)

    # === Game rewards ===

    async def record_session(
        self,
        player_address: str,
        score: int,
        game_type: str = DEFAULT_GAME_TYPE,
    ) -> dict[str, Any]:
        """
        Record a game session; the rewards contract mints the earned tokens.

        Contract method:
            record_game_session(player: Address, score: u32, game_type: String)
            -> SessionResult { session_id: u64, tokens_earned: i128 }

        Args:
            player_address: Player address
            score: Game score
            game_type: Game identifier

        Returns:
            Dict with success, tx_hash, tokens_earned, session_id, ledger,
            explorer_link. tokens_earned falls back to floor(score / 10)
            when the return value cannot be decoded.
        """
        if self._mock_mode:
            return self._mock.record_session(score)

        try:
            self._require_address(player_address)
            res = await self.invoke(
                self.config.rewards_contract,
                REWARDS_RECORD_SESSION,
                [
                    arg.address(player_address),
                    arg.uint32(score),
                    arg.string(game_type),
                ],
            )
            if not res["success"]:
                return res

            tokens_earned: int | Decimal = fallback_reward(score)
            session_id = None

            if res["return_value"] is not None:
                try:
                    session = scval.to_native(res["return_value"])
                    if isinstance(session, dict):
                        if session.get("tokens_earned") is not None:
                            tokens_earned = from_stroops(session["tokens_earned"])
                        session_id = session.get("session_id")
                except Exception as parse_err:
                    logger.warning(f"Could not parse session return value: {parse_err}")

            return {
                "success": True,
                "tx_hash": res["hash"],
                "tokens_earned": tokens_earned,
                "session_id": session_id,
                "ledger": res["ledger"],
                "explorer_link": self.explorer_link(res["hash"]),
            }
        except Exception as e:
            logger.error(f"record_session error: {e}")
            return make_error(
                ErrorCode.GAME_RECORD_FAILED,
                "Failed to record game session",
                e,
            )

    # === Tree NFT ===

    async def mint_tree_certificate(
        self,
        player_address: str,
        metadata: TreeMetadata | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Mint a soulbound Tree NFT certificate.

        Contract method:
            mint(to: Address, species: String, location: String,
                 latitude: i32, longitude: i32, plant_date: u64,
                 carbon_offset: u64, partner_org: String) -> u64

        Args:
            player_address: Certificate owner
            metadata: Tree data; missing fields take defaults

        Returns:
            Dict with success, token_id, tx_hash, ledger, explorer_link
        """
        if self._mock_mode:
            return self._mock.mint_tree_certificate()

        try:
            self._require_address(player_address)
            tree = (
                metadata
                if isinstance(metadata, TreeMetadata)
                else TreeMetadata.from_mapping(metadata)
            )

            res = await self.invoke(
                self.config.nft_contract,
                NFT_MINT,
                [
                    arg.address(player_address),
                    arg.string(tree.species),
                    arg.string(tree.location),
                    arg.int32(tree.latitude),
                    arg.int32(tree.longitude),
                    arg.uint64(tree.plant_date),
                    arg.uint64(tree.carbon_offset),
                    arg.string(tree.partner_org),
                ],
            )
            if not res["success"]:
                return res

            token_id = (
                scval.to_native(res["return_value"])
                if res["return_value"] is not None
                else None
            )
            return {
                "success": True,
                "token_id": token_id,
                "tx_hash": res["hash"],
                "ledger": res["ledger"],
                "explorer_link": self.explorer_link(res["hash"]),
            }
        except Exception as e:
            logger.error(f"mint_tree_certificate error: {e}")
            return make_error(ErrorCode.NFT_MINT_FAILED, "Failed to mint tree NFT", e)

    async def list_certificates(self, address: str) -> dict[str, Any]:
        """
        List Tree NFTs owned by an address.

        Tries get_player_trees + get_tree_data first. When enumeration is
        unavailable, falls back to the balance_of count with an empty list
        (``enumerated: False``); that count is not verified against token
        indices and may under-report.

        Per-token metadata is read with get_tree_data. Contract builds that
        name it get_tree_nft fail every metadata lookup, so the result keeps
        the full count but ``nfts`` stays empty.

        Returns:
            Dict with success, count, nfts, enumerated
        """
        if self._mock_mode:
            return self._mock.list_certificates()

        try:
            self._require_address(address)
            owner = [arg.address(address)]

            enumeration = await self.query(self.config.nft_contract, NFT_PLAYER_TREES, owner)
            if enumeration["success"] and enumeration["result"] is not None:
                token_ids = [int(t) for t in scval.to_native(enumeration["result"])]
                nfts = []
                for token_id in token_ids:
                    meta = await self.query(
                        self.config.nft_contract,
                        NFT_TREE_DATA,
                        [arg.uint64(token_id)],
                    )
                    if not meta["success"] or meta["result"] is None:
                        logger.warning(f"Skipping metadata for token {token_id}: {meta.get('message')}")
                        continue
                    nfts.append(
                        {
                            "token_id": token_id,
                            "metadata": native_to_plain(scval.to_native(meta["result"])),
                        }
                    )
                return {
                    "success": True,
                    "count": len(token_ids),
                    "nfts": nfts,
                    "enumerated": True,
                }

            logger.warning(
                f"{NFT_PLAYER_TREES} not available, falling back to {NFT_BALANCE_OF}: "
                f"{enumeration.get('message')}"
            )
            balance = await self.query(self.config.nft_contract, NFT_BALANCE_OF, owner)
            if not balance["success"]:
                return balance

            count = int(scval.to_native(balance["result"]) or 0) if balance["result"] is not None else 0
            return {"success": True, "count": count, "nfts": [], "enumerated": False}

        except Exception as e:
            logger.error(f"list_certificates error: {e}")
            return make_error(ErrorCode.NFT_FETCH_FAILED, "Failed to fetch player NFTs", e)

    # === Transactions & utilities ===

    async def get_transaction_status(self, tx_hash: str) -> dict[str, Any]:
        """
        Get final status of a previously submitted transaction.

        Returns:
            Dict with success, hash, status, ledger, created_at
        """
        if self._mock_mode:
            return self._mock.transaction_status(tx_hash)

        try:
            await self._ensure_ready()
            response = await self.server.get_transaction(tx_hash)
            status = status_name(response.status)
            logger.info(f"Transaction {mask_tx_hash(tx_hash)} status: {status}")
            return {
                "success": True,
                "hash": tx_hash,
                "status": status,
                "ledger": getattr(response, "ledger", None),
                "created_at": getattr(response, "created_at", None),
            }
        except Exception as e:
            logger.error(f"get_transaction_status error for {mask_tx_hash(tx_hash)}: {e}")
            return make_error(
                ErrorCode.TX_FETCH_FAILED,
                "Failed to fetch transaction details",
                e,
            )

    def explorer_link(self, tx_hash: str) -> str:
        """
        Build a block-explorer URL for a transaction.

        Example: https://stellar.expert/explorer/testnet/tx/<hash>
        """
        try:
            network_path = EXPLORER_NETWORK_PATHS[self.config.network]
            return f"{self.config.explorer_base}/{network_path}/tx/{tx_hash}"
        except Exception:
            return f"{DEFAULT_EXPLORER_BASE}/testnet/tx/{tx_hash}"

    @staticmethod
    def is_valid_address(address: Any) -> bool:
        """
        Validate a Stellar account (G...) or contract (C...) address.

        Never raises.
        """
        if not isinstance(address, str):
            return False
        try:
            Address(address)
            return True
        except Exception:
            return False

    def _require_address(self, address: str) -> None:
        if not self.is_valid_address(address):
            raise ValueError(f"Invalid Stellar address: {address!r}")

    def describe(self) -> dict[str, Any]:
        """Current configuration and connection status."""
        return {
            "network": self.config.network,
            "rpc_url": self.config.rpc_url,
            "mock_mode": self._mock_mode,
            "initialized": self._initialized,
            "contracts": self.config.contracts,
            "operator_public_key": self.keypair.public_key if self.keypair else None,
        }

# frontend/streamlit_app/services/mint.py
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Mint orchestration: receipt image → IPFS → `safeMint` on Base.

    idle → connecting → checking-network → capturing-image → uploading
         → awaiting-signature → awaiting-confirmation → done | failed

Each step performs exactly one external call, in this order. The contract is
never called before the upload has produced a tokenURI. A failure anywhere
moves the machine to `failed`, keeps the message, and re-raises; the attempt
is over. Start another with `reset()` or a fresh orchestrator.
"""

import base64
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

import requests

from core.errors import MintError, UploadError
from core.models import ChainParams, MintPayload, MintRecord, WalletSession
from services.wallet import WalletConnector

logger = logging.getLogger(__name__)


class MintStep(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CHECKING_NETWORK = "checking-network"
    CAPTURING_IMAGE = "capturing-image"
    UPLOADING = "uploading"
    AWAITING_SIGNATURE = "awaiting-signature"
    AWAITING_CONFIRMATION = "awaiting-confirmation"
    DONE = "done"
    FAILED = "failed"

    @property
    def label(self) -> str:
        return _LABELS.get(self, self.value)

    @property
    def number(self) -> int:
        """1-based position among the working steps, 0 otherwise."""
        try:
            return PROGRESS_STEPS.index(self) + 1
        except ValueError:
            return 0


_LABELS: dict[MintStep, str] = {
    MintStep.IDLE: "Ready to mint.",
    MintStep.CONNECTING: "Connecting to wallet...",
    MintStep.CHECKING_NETWORK: "Checking network...",
    MintStep.CAPTURING_IMAGE: "Generating receipt image...",
    MintStep.UPLOADING: "Uploading assets to IPFS...",
    MintStep.AWAITING_SIGNATURE: "Please confirm transaction in your wallet...",
    MintStep.AWAITING_CONFIRMATION: "Minting in progress on the blockchain...",
    MintStep.DONE: "Receipt minted!",
    MintStep.FAILED: "Mint failed.",
}

PROGRESS_STEPS: tuple[MintStep, ...] = (
    MintStep.CONNECTING,
    MintStep.CHECKING_NETWORK,
    MintStep.CAPTURING_IMAGE,
    MintStep.UPLOADING,
    MintStep.AWAITING_SIGNATURE,
    MintStep.AWAITING_CONFIRMATION,
)


class IpfsUploader:
    """Posts the receipt image and metadata to the backend's pinning route."""

    def __init__(
        self,
        backend_url: str,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        self._url = f"{backend_url.rstrip('/')}/upload-to-ipfs"
        self._http = session or requests.Session()
        self._timeout = timeout

    def upload(self, image_png: bytes, payload: MintPayload) -> str:
        """Return the tokenURI for the pinned metadata."""
        body = payload.as_json(base64.b64encode(image_png).decode("ascii"))
        try:
            resp = self._http.post(self._url, json=body, timeout=self._timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("IPFS upload failed: %s", e)
            raise UploadError("Failed to upload receipt to IPFS.") from e

        uri = data.get("tokenURI") if isinstance(data, dict) else None
        if not uri:
            raise UploadError("Failed to get tokenURI from backend.")
        return str(uri)


class MintOrchestrator:
    """Runs one mint attempt through the fixed step sequence."""

    def __init__(
        self,
        connector: WalletConnector,
        uploader: IpfsUploader,
        contract_address: str,
        chain: ChainParams,
        *,
        on_step: Callable[[MintStep], None] | None = None,
        receipt_timeout: float = 180.0,
    ) -> None:
        self._connector = connector
        self._uploader = uploader
        self._contract = contract_address
        self._chain = chain
        self._on_step = on_step
        self._receipt_timeout = receipt_timeout
        self.reset()

    def reset(self) -> None:
        self.step = MintStep.IDLE
        self.error: str | None = None
        self.session: WalletSession | None = None

    def _enter(self, step: MintStep) -> None:
        self.step = step
        logger.debug("mint step → %s", step.value)
        if self._on_step is not None:
            self._on_step(step)

    def mint(self, capture: Callable[[], bytes], payload: MintPayload) -> MintRecord:
        """Run the attempt.

        Args:
          capture: produces the receipt PNG; called once, after the network
            check.
          payload: upload metadata (user, range, type, items, customization).

        Raises:
          RuntimeError: the orchestrator is not idle.
          ReceiptifyError subclasses from the wallet, upload or render steps.
        """
        if self.step != MintStep.IDLE:
            raise RuntimeError("Mint attempt already finished; call reset() first.")

        try:
            self._enter(MintStep.CONNECTING)
            self.session = self._connector.connect()

            self._enter(MintStep.CHECKING_NETWORK)
            if self._connector.ensure_chain(self._chain):
                self.session.chain_id = self._chain.chain_id

            self._enter(MintStep.CAPTURING_IMAGE)
            image_png = capture()

            self._enter(MintStep.UPLOADING)
            token_uri = self._uploader.upload(image_png, payload)

            self._enter(MintStep.AWAITING_SIGNATURE)
            tx_hash = self._connector.send_safe_mint(self.session, self._contract, token_uri)

            self._enter(MintStep.AWAITING_CONFIRMATION)
            receipt = self._connector.wait_for_receipt(tx_hash, self._receipt_timeout)
            if _status(receipt) != 1:
                raise MintError(f"Transaction {tx_hash} reverted.")
        except Exception as e:
            failed_at = self.step
            self.error = str(e)
            self.session = None
            logger.exception("Mint failed during %s", failed_at.value)
            self._enter(MintStep.FAILED)
            raise

        self._enter(MintStep.DONE)
        logger.info("Minted receipt in tx %s", tx_hash)
        return MintRecord(image_png=image_png, token_uri=token_uri, tx_hash=tx_hash)


def _status(receipt: Mapping[str, Any] | Any) -> int | None:
    if isinstance(receipt, Mapping):
        return receipt.get("status")
    return getattr(receipt, "status", None)

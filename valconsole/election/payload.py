"""Byte layouts of the election request: the signed string and the submission body."""

from __future__ import annotations

import struct
from typing import Any, Protocol

from pytoniq_core import Cell, begin_cell

from valconsole.utils.exceptions import ConsoleError, FormatError

ELECTION_REQUEST_TAG = 0x654C5074  # signed by the permanent key
NEW_STAKE_TAG = 0x4E73744B  # submission body sent to the elector
RECOVER_STAKE_TAG = 0x47657424
MAX_FACTOR_SCALE = 65536
SECONDARY_KEY_ROOT_BYTES = 32

PROCESS_NEW_STAKE = "process_new_stake"
PROCESS_NEW_STAKE_PARAMS = (
    "query_id:uint64",
    "validator_pubkey:uint256",
    "stake_at:uint32",
    "max_factor:uint32",
    "adnl_addr:uint256",
    "bls_key1:uint256",
    "bls_key2:uint128",
    "signature:bytes",
)


class AbiEncoder(Protocol):
    def encode_call(
        self,
        function_signature: str,
        named_params: dict[str, Any],
        header_fields: dict[str, Any],
    ) -> Cell:
        ...


def build_signing_payload(
    elect_time: int,
    max_factor: int,
    wallet_id: bytes,
    adnl_key: bytes,
    secondary_public_key: bytes = b"",
) -> bytes:
    """{tag, elect_time, max_factor, wallet_id, adnl_key[, secondary key]}, big-endian."""
    return (
        struct.pack(">III", ELECTION_REQUEST_TAG, elect_time, max_factor)
        + wallet_id
        + adnl_key
        + secondary_public_key
    )


def build_fixed_payload(
    *,
    query_id: int,
    public_key: bytes,
    elect_time: int,
    max_factor: int,
    adnl_key: bytes,
    signature: bytes,
    secondary_public_key: bytes = b"",
) -> Cell:
    """Submission body with the signature in a referenced cell.

    A secondary key is split: its first 32 bytes stay in the root cell, the
    rest precede the signature in the referenced cell.
    """
    body = (
        begin_cell()
        .store_uint(NEW_STAKE_TAG, 32)
        .store_uint(query_id, 64)
        .store_bytes(public_key)
        .store_uint(elect_time, 32)
        .store_uint(max_factor, 32)
        .store_bytes(adnl_key)
    )
    tail = begin_cell()
    if secondary_public_key:
        body = body.store_bytes(secondary_public_key[:SECONDARY_KEY_ROOT_BYTES])
        tail = tail.store_bytes(secondary_public_key[SECONDARY_KEY_ROOT_BYTES:])
    tail = tail.store_bytes(signature)
    return body.store_ref(tail.end_cell()).end_cell()


def build_contract_call_payload(
    encoder: AbiEncoder,
    *,
    query_id: int,
    public_key: bytes,
    elect_time: int,
    max_factor: int,
    adnl_key: bytes,
    signature: bytes,
    now_ms: int,
    secondary_public_key: bytes = b"",
) -> Cell:
    """Submission body encoded as a call to the elector's process_new_stake."""
    params: dict[str, Any] = {
        "query_id": query_id,
        "validator_pubkey": "0x" + public_key.hex(),
        "stake_at": elect_time,
        "max_factor": max_factor,
        "adnl_addr": "0x" + adnl_key.hex(),
    }
    if secondary_public_key:
        params["bls_key1"] = "0x" + secondary_public_key[:SECONDARY_KEY_ROOT_BYTES].hex()
        params["bls_key2"] = "0x" + secondary_public_key[SECONDARY_KEY_ROOT_BYTES:].hex()
    params["signature"] = signature.hex()
    declared = [param for param in PROCESS_NEW_STAKE_PARAMS if param.partition(":")[0] in params]
    signature_line = f"{PROCESS_NEW_STAKE}({','.join(declared)})"
    try:
        return encoder.encode_call(signature_line, params, {"time": now_ms})
    except ConsoleError:
        raise
    except Exception as exc:
        raise FormatError(f"can't encode {PROCESS_NEW_STAKE} call: {exc}", name="abi_encoder") from exc


def build_recover_stake_payload(query_id: int) -> Cell:
    return begin_cell().store_uint(RECOVER_STAKE_TAG, 32).store_uint(query_id, 64).end_cell()

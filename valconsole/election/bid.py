"""Election bid workflow.

Provisions validator keys on the remote node, has the node sign the
election request with the new permanent key, verifies that signature
locally and writes the submission body as a bag of cells.

Steps run strictly in order and the first failure aborts the bid. Keys
already registered on the node by earlier steps stay registered.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Awaitable, Callable, Sequence

from loguru import logger
from pytoniq_core import Cell

from valconsole.control.params import encode_hash, parse_any, parse_int
from valconsole.election.payload import (
    MAX_FACTOR_SCALE,
    AbiEncoder,
    build_contract_call_payload,
    build_fixed_payload,
    build_recover_stake_payload,
    build_signing_payload,
)
from valconsole.identity.ed25519 import verify_signature
from valconsole.transport.channel import load_object
from valconsole.utils.exceptions import ConsoleError, FormatError, ParameterError, ValidationError
from valconsole.utils.helpers import Clock, wall_clock, write_artifact

if TYPE_CHECKING:
    from valconsole.config.schema import ConsoleConfig
    from valconsole.control.session import ControlSession

DEFAULT_BID_PATH = "validator-query.boc"
DEFAULT_RECOVER_PATH = "recover-query.boc"
MASTERCHAIN_PREFIX = "-1:"
MAX_FACTOR_MIN = 1.0
MAX_FACTOR_MAX = 100.0


@dataclass(frozen=True)
class ElectionBid:
    """Values accumulated by the workflow, one step at a time."""

    wallet_id: bytes
    elect_time: int
    expire_time: int
    max_factor: int
    permanent_key_hash: bytes = b""
    public_key: bytes = b""
    adnl_key_hash: bytes = b""
    secondary_key_hash: bytes = b""
    secondary_public_key: bytes = b""
    signed_data: bytes = b""
    signature: bytes = b""

    @property
    def perm(self) -> str:
        return encode_hash(self.permanent_key_hash)

    @property
    def adnl(self) -> str:
        return encode_hash(self.adnl_key_hash)


Step = Callable[["ControlSession", ElectionBid], Awaitable[ElectionBid]]


def parse_wallet_id(value: str | None) -> bytes:
    def decode(raw: str) -> bytes:
        if not raw.startswith(MASTERCHAIN_PREFIX):
            raise ValidationError("use masterchain wallet", field="wallet_id")
        wallet_id = bytes.fromhex(raw[len(MASTERCHAIN_PREFIX):])
        if len(wallet_id) != 32:
            raise FormatError(f"wallet address must be 32 bytes, got {len(wallet_id)}", name="wallet_id")
        return wallet_id

    return parse_any(value, "wallet_id", decode)


def convert_max_factor(value: float | None) -> int:
    """Fixed-point max factor, scale 2**16."""
    if value is None:
        raise ParameterError("you must give max_factor as real", name="max_factor")
    if not (MAX_FACTOR_MIN <= value <= MAX_FACTOR_MAX):  # also rejects NaN
        raise ValidationError("<max-factor> must be a real number 1..100", field="max_factor")
    return round(value * MAX_FACTOR_SCALE)


def prepare_bid(config: "ConsoleConfig", params: Sequence[str]) -> ElectionBid:
    """Check every precondition before the first remote call."""
    params = list(params)
    wallet_id = parse_wallet_id(config.wallet_id)
    elect_time = parse_int(params[0] if params else None, "elect_time")
    if elect_time <= 0:
        raise ValidationError("<elect-utime> must be a positive integer", field="elect_time")
    expire_time = parse_int(params[1] if len(params) > 1 else None, "expire_time")
    if expire_time <= elect_time:
        raise ValidationError("<expire-utime> must be greater than elect_time", field="expire_time")
    return ElectionBid(
        wallet_id=wallet_id,
        elect_time=elect_time,
        expire_time=expire_time,
        max_factor=convert_max_factor(config.max_factor),
    )


async def _run(session: "ControlSession", name: str, *params: str) -> bytes:
    text, raw = await session.process_command(name, list(params))
    logger.trace(text)
    return raw


async def generate_permanent_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    return replace(bid, permanent_key_hash=await _run(session, "newkey"))


async def export_permanent_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    return replace(bid, public_key=await _run(session, "exportpub", bid.perm))


async def add_permanent_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    await _run(session, "addpermkey", bid.perm, str(bid.elect_time), str(bid.expire_time))
    return bid


async def add_temp_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    # The node expects the permanent key to be registered as its own temp key.
    await _run(session, "addtempkey", bid.perm, bid.perm, str(bid.expire_time))
    return bid


async def generate_adnl_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    return replace(bid, adnl_key_hash=await _run(session, "newkey"))


async def add_adnl_address(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    await _run(session, "addadnl", bid.adnl, "0")
    return bid


async def add_validator_address(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    await _run(session, "addvalidatoraddr", bid.perm, bid.adnl, str(bid.elect_time))
    return bid


async def add_secondary_key(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    key_hash = await _run(session, "newkey", "bls")
    public_key = await _run(session, "exportpub", encode_hash(key_hash))
    await _run(session, "addblskey", bid.perm, encode_hash(key_hash), str(bid.elect_time))
    return replace(bid, secondary_key_hash=key_hash, secondary_public_key=public_key)


async def sign_request(session: "ControlSession", bid: ElectionBid) -> ElectionBid:
    data = build_signing_payload(
        bid.elect_time,
        bid.max_factor,
        bid.wallet_id,
        bid.adnl_key_hash,
        bid.secondary_public_key,
    )
    logger.trace(f"data to sign {data.hex().upper()}")
    signature = await _run(session, "sign", bid.perm, data.hex().upper())
    verify_signature(bid.public_key, data, signature)
    return replace(bid, signed_data=data, signature=signature)


def election_steps(secondary_key: bool) -> tuple[Step, ...]:
    steps: list[Step] = [
        generate_permanent_key,
        export_permanent_key,
        add_permanent_key,
        add_temp_key,
        generate_adnl_key,
        add_adnl_address,
        add_validator_address,
    ]
    if secondary_key:
        steps.append(add_secondary_key)
    steps.append(sign_request)
    return tuple(steps)


async def run_election_bid(session: "ControlSession", bid: ElectionBid, *, secondary_key: bool = False) -> ElectionBid:
    """Run every step in order; returns the bid with key material and a verified signature."""
    for step in election_steps(secondary_key):
        logger.trace(f"election bid: {step.__name__}")
        try:
            bid = await step(session, bid)
        except ConsoleError as exc:
            raise exc.with_context(step=step.__name__)
    return bid


def load_abi_encoder(config: "ConsoleConfig") -> AbiEncoder:
    if not config.abi_encoder:
        raise ParameterError('bid_encoding "abi" requires an "abi_encoder" (module:attr)', name="abi_encoder")
    try:
        target = load_object(config.abi_encoder)
    except (ImportError, AttributeError, ValueError) as exc:
        raise ParameterError(f"can't load abi encoder {config.abi_encoder}: {exc}", name="abi_encoder") from exc
    encoder = target() if isinstance(target, type) else target
    if not callable(getattr(encoder, "encode_call", None)):
        raise ParameterError(f"abi encoder {config.abi_encoder} has no encode_call", name="abi_encoder")
    return encoder


def build_bid_payload(
    bid: ElectionBid,
    *,
    query_id: int,
    encoder: AbiEncoder | None = None,
    now_ms: int = 0,
) -> Cell:
    common = dict(
        query_id=query_id,
        public_key=bid.public_key,
        elect_time=bid.elect_time,
        max_factor=bid.max_factor,
        adnl_key=bid.adnl_key_hash,
        signature=bid.signature,
        secondary_public_key=bid.secondary_public_key,
    )
    if encoder is None:
        return build_fixed_payload(**common)
    return build_contract_call_payload(encoder, now_ms=now_ms, **common)


async def process_election_bid(session: "ControlSession", params: Sequence[str]) -> tuple[str, bytes]:
    """election-bid <elect-utime> <expire-utime> [output path]"""
    params = list(params)
    config = session.config
    bid = prepare_bid(config, params)
    encoder = load_abi_encoder(config) if config.bid_encoding == "abi" else None
    bid = await run_election_bid(session, bid, secondary_key=config.secondary_key)

    now = session.clock()
    try:
        body = build_bid_payload(bid, query_id=now, encoder=encoder, now_ms=now * 1000)
    except ConsoleError as exc:
        raise exc.with_context(step="build_bid_payload")
    logger.trace(f"message body {body}")
    data = body.to_boc()
    path = params[2] if len(params) > 2 else DEFAULT_BID_PATH
    write_artifact(path, data)
    return f"Message body is {base64.b64encode(data).decode('ascii')} saved to path {path}", data


def process_recover_stake(params: Sequence[str], *, clock: Clock = wall_clock) -> tuple[str, bytes]:
    """recover_stake [output path]"""
    params = list(params)
    data = build_recover_stake_payload(clock()).to_boc()
    path = params[0] if params else DEFAULT_RECOVER_PATH
    write_artifact(path, data)
    return f"Message body is {base64.b64encode(data).decode('ascii')} saved to path {path}", data

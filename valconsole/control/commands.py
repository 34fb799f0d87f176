"""Command registry: name -> (request builder, response parser).

Every command knows which response shape it expects. The session never
hands a parser an answer of the wrong shape: a mismatch is reported as a
ProtocolError before the parser runs.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from pytoniq_core import Cell

from valconsole.control.params import (
    INT32_MAX,
    parse_data,
    parse_int,
    parse_int256,
    parse_str,
    parse_uint,
)
from valconsole.tl import schema as tl
from valconsole.tl.codec import serialize_boxed
from valconsole.utils.exceptions import (
    FormatError,
    NotFoundError,
    ProtocolError,
    UnsupportedCommandError,
    ValidationError,
)
from valconsole.utils.helpers import Clock, wall_clock, write_artifact

ED25519_KEY_TYPE = 0x4813B4C6
BLS_KEY_TYPE = 7
ADNL_CATEGORY_MAX = 15

RequestBuilder = Callable[[Sequence[str], Clock], tl.TLObject]
ResponseParser = Callable[[tl.TLObject, Sequence[str]], tuple[str, bytes]]


@dataclass(frozen=True)
class Command:
    """One registry entry."""

    name: str
    usage: str
    build: RequestBuilder
    expects: tuple[type[tl.TLObject], ...] = (tl.Success,)
    parse: ResponseParser | None = None

    def receive(self, answer: tl.TLObject, params: Sequence[str]) -> tuple[str, bytes]:
        if not isinstance(answer, self.expects):
            expected = " | ".join(cls.tl_name for cls in self.expects)
            raise ProtocolError(
                f"wrong response to {self.name}: got {answer.tl_name}, expected {expected}",
                command=self.name,
            )
        if self.parse is None:
            return "success", b""
        return self.parse(answer, params)


def _encode_pair(value: bytes) -> str:
    return f"{value.hex()} {base64.b64encode(value).decode('ascii')}"


def _positive_ttl(ttl: int, anchor: str) -> int:
    if ttl <= 0:
        raise ValidationError(f"<expire-at> must be later than {anchor} (ttl {ttl})", field="expire_at")
    return ttl


# ----- key management -----
def _build_newkey(params: Sequence[str], clock: Clock) -> tl.TLObject:
    if not params:
        return tl.GenerateKeyPair(key_type=ED25519_KEY_TYPE)
    key_type = str(params[0]).strip('"').lower()
    if key_type != "bls":
        raise ValidationError(f"invalid key type {params[0]!r}, only 'bls' is accepted", field="key_type")
    return tl.GenerateKeyPair(key_type=BLS_KEY_TYPE)


def _parse_newkey(answer: tl.KeyHash, params: Sequence[str]) -> tuple[str, bytes]:
    key_hash = answer.key_hash
    return f"received public key hash: {_encode_pair(key_hash)}", key_hash


def _build_exportpub(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    return tl.ExportPublicKey(key_hash=parse_int256(_at(params, 0), "key_hash"))


def _parse_exportpub(answer: tl.TLObject, params: Sequence[str]) -> tuple[str, bytes]:
    pub_key = answer.key
    if not pub_key:
        raise ProtocolError("public key not found in answer", command="exportpub")
    return f"imported key: {_encode_pair(pub_key)}", pub_key


def _build_sign(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    return tl.Sign(
        key_hash=parse_int256(_at(params, 0), "key_hash"),
        data=parse_data(_at(params, 1), "data"),
    )


def _parse_sign(answer: tl.Signature, params: Sequence[str]) -> tuple[str, bytes]:
    signature = answer.signature
    return f"got signature: {_encode_pair(signature)}", signature


def _build_addpermkey(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    key_hash = parse_int256(_at(params, 0), "key_hash")
    election_date = parse_int(_at(params, 1), "election_date")
    ttl = parse_int(_at(params, 2), "expire_at") - election_date
    return tl.AddValidatorPermanentKey(
        key_hash=key_hash,
        election_date=election_date,
        ttl=_positive_ttl(ttl, "election_date"),
    )


def _build_linked_key(request_cls: type[tl.TLObject]) -> RequestBuilder:
    """Builder for keys bound to a permanent key; ttl is anchored to the wall clock."""

    def build(params: Sequence[str], clock: Clock) -> tl.TLObject:
        params = list(params)
        permanent_key_hash = parse_int256(_at(params, 0), "permanent_key_hash")
        key_hash = parse_int256(_at(params, 1), "key_hash")
        ttl = parse_int(_at(params, 2), "expire_at") - clock()
        return request_cls(
            permanent_key_hash=permanent_key_hash,
            key_hash=key_hash,
            ttl=_positive_ttl(ttl, "now"),
        )

    return build


def _build_addadnl(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    key_hash = parse_int256(_at(params, 0), "key_hash")
    category = parse_int(_at(params, 1), "category")
    if category < 0 or category > ADNL_CATEGORY_MAX:
        raise ValidationError("category must be not negative and less than 16", field="category")
    return tl.AddAdnlId(key_hash=key_hash, category=category)


# ----- node status -----
def _parse_stats(answer: tl.Stats, params: Sequence[str]) -> tuple[str, bytes]:
    lines = [f'\t"{stat.key}":\t{stat.value or "null"}' for stat in answer.stats]
    return "{\n" + ",\n".join(lines) + "\n}", serialize_boxed(answer)


def _parse_session_stats(answer: tl.SessionStats, params: Sequence[str]) -> tuple[str, bytes]:
    blocks = []
    for session in answer.stats:
        inner = ",\n".join(f'\t\t"{stat.key}":\t{stat.value or "null"}' for stat in session.stats)
        blocks.append(f'\t"{session.session_id}":\t{{\n{inner}\n\t}}')
    return "{\n" + ",\n".join(blocks) + "\n}", serialize_boxed(answer)


def _build_gc_interval(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    interval_ms = parse_uint(_at(params, 0), "milliseconds")
    if interval_ms > INT32_MAX:
        raise ValidationError(f"<milliseconds> must not exceed {INT32_MAX}", field="interval_ms")
    return tl.SetStatesGcInterval(interval_ms=interval_ms)


# ----- chain access -----
def _build_sendmessage(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    filename = parse_str(_at(params, 0), "filename")
    try:
        body = Path(filename).read_bytes()
    except OSError as exc:
        raise FormatError(f"Can't read file {filename} with message: {exc}", name="filename") from exc
    return tl.SendMessage(body=body)


def _build_getconfig(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    return tl.GetConfigParams(param_list=[parse_int(_at(params, 0), "paramnumber")])


def _parse_getconfig(answer: tl.ConfigInfo, params: Sequence[str]) -> tuple[str, bytes]:
    try:
        text = answer.config_proof.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise FormatError(f"config param is not valid utf-8: {exc}") from exc
    return text, answer.config_proof


def _build_getblockchainconfig(params: Sequence[str], clock: Clock) -> tl.TLObject:
    return tl.GetConfigAll()


def _parse_getblockchainconfig(answer: tl.ConfigInfo, params: Sequence[str]) -> tuple[str, bytes]:
    return answer.config_proof.hex(), answer.config_proof


def _build_getaccountstate(params: Sequence[str], clock: Clock) -> tl.TLObject:
    params = list(params)
    account = parse_str(_at(params, 0), "account id")
    parse_str(_at(params, 1), "file name")
    return tl.GetShardAccountState(account_address=tl.AccountAddress(account_address=account))


def _parse_getaccountstate(answer: tl.TLObject, params: Sequence[str]) -> tuple[str, bytes]:
    params = list(params)
    account = parse_str(_at(params, 0), "account id")
    boc_name = parse_str(_at(params, 1), "file name")
    if isinstance(answer, tl.ShardAccountNone):
        raise NotFoundError("account", account)
    try:
        shard_account = Cell.one_from_boc(answer.shard_account)
    except Exception as exc:
        raise FormatError(f"can't parse shard account of {account}: {exc}") from exc
    if not shard_account.refs:
        raise FormatError(f"shard account of {account} has no account cell")
    account_state = shard_account.refs[0].to_boc()
    write_artifact(boc_name, account_state)
    return _encode_pair(account_state), account_state


def _at(params: list[str], index: int) -> str | None:
    return params[index] if index < len(params) else None


_COMMANDS: tuple[Command, ...] = (
    Command(
        "newkey",
        "newkey [bls]\tgenerates new key pair on server",
        _build_newkey,
        (tl.KeyHash,),
        _parse_newkey,
    ),
    Command(
        "exportpub",
        "exportpub <keyhash>\texports public key by key hash",
        _build_exportpub,
        (tl.PublicKeyEd25519, tl.PublicKeyBls),
        _parse_exportpub,
    ),
    Command(
        "sign",
        "sign <keyhash> <data>\tsigns bytestring with privkey",
        _build_sign,
        (tl.Signature,),
        _parse_sign,
    ),
    Command(
        "addpermkey",
        "addpermkey <keyhash> <election-date> <expire-at>\tadd validator permanent key",
        _build_addpermkey,
    ),
    Command(
        "addtempkey",
        "addtempkey <permkeyhash> <keyhash> <expire-at>\tadd validator temp key",
        _build_linked_key(tl.AddValidatorTempKey),
    ),
    Command(
        "addvalidatoraddr",
        "addvalidatoraddr <permkeyhash> <keyhash> <expire-at>\tadd validator ADNL addr",
        _build_linked_key(tl.AddValidatorAdnlAddress),
    ),
    Command(
        "addblskey",
        "addblskey <permkeyhash> <keyhash> <expire-at>\tadd validator bls key",
        _build_linked_key(tl.AddValidatorBlsKey),
    ),
    Command(
        "addadnl",
        "addadnl <keyhash> <category>\tuse key as ADNL addr",
        _build_addadnl,
    ),
    Command(
        "getstats",
        "getstats\tget status full node or validator",
        lambda params, clock: tl.GetStats(),
        (tl.Stats,),
        _parse_stats,
    ),
    Command(
        "getconsensusstats",
        "getconsensusstats\tget consensus statistics for the node",
        lambda params, clock: tl.GetSessionStats(),
        (tl.SessionStats,),
        _parse_session_stats,
    ),
    Command(
        "setstatesgcinterval",
        "setstatesgcinterval <milliseconds>\tset interval in <milliseconds> between shard states GC runs",
        _build_gc_interval,
    ),
    Command(
        "sendmessage",
        "sendmessage <filename>\tload a serialized message from <filename> and send it to server",
        _build_sendmessage,
    ),
    Command(
        "getconfig",
        "getconfig <param_number>\tget current config param from masterchain state",
        _build_getconfig,
        (tl.ConfigInfo,),
        _parse_getconfig,
    ),
    Command(
        "getblockchainconfig",
        "getblockchainconfig\tget current config from masterchain state",
        _build_getblockchainconfig,
        (tl.ConfigInfo,),
        _parse_getblockchainconfig,
    ),
    Command(
        "getaccountstate",
        "getaccountstate <account id> <file name>\tsave accountstate to file",
        _build_getaccountstate,
        (tl.ShardAccountState, tl.ShardAccountNone),
        _parse_getaccountstate,
    ),
)

COMMANDS: Mapping[str, Command] = MappingProxyType({command.name: command for command in _COMMANDS})


def get_command(name: str) -> Command:
    command = COMMANDS.get(name)
    if command is None:
        raise UnsupportedCommandError(name)
    return command


def command_send(name: str, params: Sequence[str], clock: Clock = wall_clock) -> tl.TLObject:
    """Build the request object for a registry command."""
    return get_command(name).build(list(params), clock)


def command_receive(name: str, answer: tl.TLObject, params: Sequence[str]) -> tuple[str, bytes]:
    """Check the answer shape and render it as (description, raw bytes)."""
    return get_command(name).receive(answer, list(params))


def command_help(name: str | None = None) -> str:
    if name is None:
        return "\n".join(command.usage for command in _COMMANDS)
    return get_command(name).usage

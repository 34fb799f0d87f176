"""TL objects exchanged with the validator control endpoint.

Each model declares its TL scheme line; field layout and the 4-byte
constructor tag (little-endian CRC32 of the line) are derived from it.
"""

from __future__ import annotations

import struct
import typing
import zlib

import pydantic

TL_TYPES_BY_TAG: dict[bytes, type["TLObject"]] = {}
TL_TYPES_BY_NAME: dict[str, type["TLObject"]] = {}


def _parse_scheme(line: str) -> tuple[str, tuple[tuple[str, str], ...], str]:
    head, _, result = line.partition("=")
    tokens = head.split()
    name = tokens[0]
    fields: list[tuple[str, str]] = []
    pending_vector = False
    for token in tokens[1:]:
        if token.endswith(":vector"):
            fields.append((token[: -len(":vector")], "vector"))
            pending_vector = True
            continue
        if pending_vector:
            field_name, _ = fields[-1]
            fields[-1] = (field_name, f"vector {token}")
            pending_vector = False
            continue
        field_name, _, field_type = token.partition(":")
        fields.append((field_name, field_type))
    return name, tuple(fields), result.strip()


class TLObject(pydantic.BaseModel):
    tl_scheme: typing.ClassVar[str] = ""
    tl_name: typing.ClassVar[str] = ""
    tl_fields: typing.ClassVar[tuple[tuple[str, str], ...]] = ()
    tl_result: typing.ClassVar[str] = ""
    tl_tag: typing.ClassVar[bytes] = b""
    model_config = pydantic.ConfigDict(frozen=True)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: typing.Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if not cls.tl_scheme:
            return
        cls.tl_name, cls.tl_fields, cls.tl_result = _parse_scheme(cls.tl_scheme)
        cls.tl_tag = struct.pack("<I", zlib.crc32(cls.tl_scheme.encode("utf-8")))
        TL_TYPES_BY_TAG[cls.tl_tag] = cls
        TL_TYPES_BY_NAME[cls.tl_name] = cls


# ===== common =====
class BlockIdExt(TLObject):
    tl_scheme = "tonNode.blockIdExt workchain:int shard:long seqno:int root_hash:int256 file_hash:int256 = tonNode.BlockIdExt"
    workchain: int = 0
    shard: int = 0
    seqno: int = 0
    root_hash: bytes = b"\x00" * 32
    file_hash: bytes = b"\x00" * 32


class AccountAddress(TLObject):
    tl_scheme = "accountAddress account_address:string = AccountAddress"
    account_address: str = ""


# ===== envelope =====
class ControlQuery(TLObject):
    tl_scheme = "engine.validator.controlQuery data:bytes = Object"
    data: bytes = b""


class ControlQueryError(TLObject):
    tl_scheme = "engine.validator.controlQueryError code:int message:string = engine.validator.ControlQueryError"
    code: int = 0
    message: str = ""


class Success(TLObject):
    tl_scheme = "engine.validator.success = engine.validator.Success"


# ===== engine.validator functions =====
class GenerateKeyPair(TLObject):
    tl_scheme = "engine.validator.generateKeyPair key_type:int = engine.validator.KeyHash"
    key_type: int = 0


class ExportPublicKey(TLObject):
    tl_scheme = "engine.validator.exportPublicKey key_hash:int256 = PublicKey"
    key_hash: bytes = b"\x00" * 32


class Sign(TLObject):
    tl_scheme = "engine.validator.sign key_hash:int256 data:bytes = engine.validator.Signature"
    key_hash: bytes = b"\x00" * 32
    data: bytes = b""


class AddValidatorPermanentKey(TLObject):
    tl_scheme = (
        "engine.validator.addValidatorPermanentKey key_hash:int256 election_date:int ttl:int"
        " = engine.validator.Success"
    )
    key_hash: bytes = b"\x00" * 32
    election_date: int = 0
    ttl: int = 0


class AddValidatorTempKey(TLObject):
    tl_scheme = (
        "engine.validator.addValidatorTempKey permanent_key_hash:int256 key_hash:int256 ttl:int"
        " = engine.validator.Success"
    )
    permanent_key_hash: bytes = b"\x00" * 32
    key_hash: bytes = b"\x00" * 32
    ttl: int = 0


class AddValidatorAdnlAddress(TLObject):
    tl_scheme = (
        "engine.validator.addValidatorAdnlAddress permanent_key_hash:int256 key_hash:int256 ttl:int"
        " = engine.validator.Success"
    )
    permanent_key_hash: bytes = b"\x00" * 32
    key_hash: bytes = b"\x00" * 32
    ttl: int = 0


class AddValidatorBlsKey(TLObject):
    tl_scheme = (
        "engine.validator.addValidatorBlsKey permanent_key_hash:int256 key_hash:int256 ttl:int"
        " = engine.validator.Success"
    )
    permanent_key_hash: bytes = b"\x00" * 32
    key_hash: bytes = b"\x00" * 32
    ttl: int = 0


class AddAdnlId(TLObject):
    tl_scheme = "engine.validator.addAdnlId key_hash:int256 category:int = engine.validator.Success"
    key_hash: bytes = b"\x00" * 32
    category: int = 0


class GetStats(TLObject):
    tl_scheme = "engine.validator.getStats = engine.validator.Stats"


class GetSessionStats(TLObject):
    tl_scheme = "engine.validator.getSessionStats = engine.validator.SessionStats"


class SetStatesGcInterval(TLObject):
    tl_scheme = "engine.validator.setStatesGcInterval interval_ms:int = engine.validator.Success"
    interval_ms: int = 0


# ===== engine.validator results =====
class KeyHash(TLObject):
    tl_scheme = "engine.validator.keyHash key_hash:int256 = engine.validator.KeyHash"
    key_hash: bytes = b"\x00" * 32


class PublicKeyEd25519(TLObject):
    tl_scheme = "pub.ed25519 key:int256 = PublicKey"
    key: bytes = b"\x00" * 32


class PublicKeyBls(TLObject):
    tl_scheme = "pub.bls key:bytes = PublicKey"
    key: bytes = b""


class Signature(TLObject):
    tl_scheme = "engine.validator.signature signature:bytes = engine.validator.Signature"
    signature: bytes = b""


class OneStat(TLObject):
    tl_scheme = "engine.validator.oneStat key:string value:string = engine.validator.OneStat"
    key: str = ""
    value: str = ""


class Stats(TLObject):
    tl_scheme = "engine.validator.stats stats:vector engine.validator.oneStat = engine.validator.Stats"
    stats: list[OneStat] = []


class OneSessionStat(TLObject):
    tl_scheme = (
        "engine.validator.oneSessionStat session_id:string stats:vector engine.validator.oneStat"
        " = engine.validator.OneSessionStat"
    )
    session_id: str = ""
    stats: list[OneStat] = []


class SessionStats(TLObject):
    tl_scheme = (
        "engine.validator.sessionStats stats:vector engine.validator.oneSessionStat"
        " = engine.validator.SessionStats"
    )
    stats: list[OneSessionStat] = []


# ===== lite server / raw =====
class SendMessage(TLObject):
    tl_scheme = "liteServer.sendMessage body:bytes = liteServer.SendMsgStatus"
    body: bytes = b""


class SendMsgStatus(TLObject):
    tl_scheme = "liteServer.sendMsgStatus status:int = liteServer.SendMsgStatus"
    status: int = 0


class GetConfigAll(TLObject):
    tl_scheme = "liteServer.getConfigAll mode:# id:tonNode.blockIdExt = liteServer.ConfigInfo"
    mode: int = 0
    id: BlockIdExt = BlockIdExt()


class GetConfigParams(TLObject):
    tl_scheme = (
        "liteServer.getConfigParams mode:# id:tonNode.blockIdExt param_list:vector int"
        " = liteServer.ConfigInfo"
    )
    mode: int = 0
    id: BlockIdExt = BlockIdExt()
    param_list: list[int] = []


class ConfigInfo(TLObject):
    tl_scheme = (
        "liteServer.configInfo mode:# id:tonNode.blockIdExt state_proof:bytes config_proof:bytes"
        " = liteServer.ConfigInfo"
    )
    mode: int = 0
    id: BlockIdExt = BlockIdExt()
    state_proof: bytes = b""
    config_proof: bytes = b""


class GetShardAccountState(TLObject):
    tl_scheme = "raw.getShardAccountState account_address:accountAddress = raw.ShardAccountState"
    account_address: AccountAddress = AccountAddress()


class ShardAccountState(TLObject):
    tl_scheme = "raw.shardAccountState shard_account:bytes = raw.ShardAccountState"
    shard_account: bytes = b""


class ShardAccountNone(TLObject):
    tl_scheme = "raw.shardAccountNone = raw.ShardAccountState"


# Closed set of shapes a control query can be answered with.
Response = typing.Union[
    Success,
    ControlQueryError,
    KeyHash,
    PublicKeyEd25519,
    PublicKeyBls,
    Signature,
    Stats,
    SessionStats,
    ConfigInfo,
    SendMsgStatus,
    ShardAccountState,
    ShardAccountNone,
]
RESPONSE_TYPES: tuple[type[TLObject], ...] = typing.get_args(Response)

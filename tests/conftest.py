"""Pytest hooks and fixtures."""

from __future__ import annotations

import hashlib
import os

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from valconsole.config.schema import ConsoleConfig
from valconsole.control.commands import BLS_KEY_TYPE
from valconsole.control.session import ControlSession
from valconsole.tl import schema as tl
from valconsole.tl.codec import deserialize_boxed, serialize_boxed

NOW = 1_700_000_000
WALLET_ID = "-1:" + "ab" * 32


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "requires_node: needs a reachable validator control endpoint (skipped in CI)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip requires_node tests when running in CI (no node available)."""
    if os.environ.get("CI") != "true":
        return
    skip = pytest.mark.skip(reason="Requires a validator node (skipped in CI)")
    for item in items:
        if "requires_node" in item.keywords:
            item.add_marker(skip)


class FakeNode:
    """In-memory control endpoint: holds real Ed25519 keys and answers TL requests."""

    def __init__(self) -> None:
        self.keys: dict[bytes, ed25519.Ed25519PrivateKey] = {}
        self.bls_keys: dict[bytes, bytes] = {}
        self.requests: list[tl.TLObject] = []
        self.tamper_signature = False
        self.fail_on: type[tl.TLObject] | None = None
        self.closed = False

    async def query(self, data: bytes) -> bytes:
        envelope = deserialize_boxed(data)
        assert isinstance(envelope, tl.ControlQuery)
        request = deserialize_boxed(envelope.data)
        self.requests.append(request)
        return serialize_boxed(self.handle(request))

    async def shutdown(self) -> None:
        self.closed = True

    def handle(self, request: tl.TLObject) -> tl.TLObject:
        if self.fail_on is not None and isinstance(request, self.fail_on):
            return tl.ControlQueryError(code=651, message="rejected by node")
        if isinstance(request, tl.GenerateKeyPair):
            if request.key_type == BLS_KEY_TYPE:
                public = hashlib.sha384(str(len(self.bls_keys)).encode()).digest()
                key_hash = hashlib.sha256(public).digest()
                self.bls_keys[key_hash] = public
                return tl.KeyHash(key_hash=key_hash)
            private = ed25519.Ed25519PrivateKey.generate()
            key_hash = hashlib.sha256(raw_public_key(private)).digest()
            self.keys[key_hash] = private
            return tl.KeyHash(key_hash=key_hash)
        if isinstance(request, tl.ExportPublicKey):
            if request.key_hash in self.bls_keys:
                return tl.PublicKeyBls(key=self.bls_keys[request.key_hash])
            if request.key_hash not in self.keys:
                return tl.ControlQueryError(code=404, message="key not found")
            return tl.PublicKeyEd25519(key=raw_public_key(self.keys[request.key_hash]))
        if isinstance(request, tl.Sign):
            signature = self.keys[request.key_hash].sign(request.data)
            if self.tamper_signature:
                signature = bytes([signature[0] ^ 0x01]) + signature[1:]
            return tl.Signature(signature=signature)
        if isinstance(request, tl.GetStats):
            return tl.Stats(stats=[tl.OneStat(key="sync_status", value='"synced"')])
        return tl.Success()

    def requested(self) -> list[type[tl.TLObject]]:
        return [type(request) for request in self.requests]


def raw_public_key(private: ed25519.Ed25519PrivateKey) -> bytes:
    return private.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def console_config() -> ConsoleConfig:
    return ConsoleConfig(
        transport="fake_transport:connect",
        transport_config={},
        wallet_id=WALLET_ID,
        max_factor=2.5,
    )


@pytest.fixture
def make_session(node, console_config):
    def factory(config: ConsoleConfig | None = None, channel=None, now: int = NOW) -> ControlSession:
        return ControlSession(channel or node, config or console_config, clock=lambda: now)

    return factory

from types import SimpleNamespace

import pytest

from valconsole.control import frontend
from valconsole.control.frontend import run_batch, run_interactive, run_one
from valconsole.tl import schema as tl

KEY_HEX = "22" * 32
NOW = 1_700_000_000


@pytest.mark.asyncio
async def test_batch_reports_errors_and_continues(make_session, node) -> None:
    lines: list[str] = []
    failures = await run_batch(
        make_session(),
        ['"newkey"', "bogus", f"addadnl {KEY_HEX} 16", "getstats"],
        lines.append,
    )
    assert failures == 2
    assert len(lines) == 4
    assert lines[0].startswith("received public key hash")
    assert lines[1] == "Error executing command: command bogus not supported"
    assert lines[2].startswith("Error executing command: category must be")
    assert '"sync_status"' in lines[3]
    assert node.requested() == [tl.GenerateKeyPair, tl.GetStats]


@pytest.mark.asyncio
async def test_batch_delay_between_commands(make_session, monkeypatch) -> None:
    sleeps: list[float] = []

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    monkeypatch.setattr(frontend, "asyncio", SimpleNamespace(sleep=fake_sleep))
    await run_batch(make_session(), ["newkey", "newkey"], lambda text: None, delay=0.5)
    assert sleeps == [0.5, 0.5]


@pytest.mark.asyncio
async def test_interactive_skips_blank_lines_and_stops_on_quit(make_session, node) -> None:
    pending = iter(["", "   ", "newkey\n", "quit", "newkey"])

    async def read_line():
        return next(pending, None)

    lines: list[str] = []
    await run_interactive(make_session(), read_line, lines.append)
    assert node.requested() == [tl.GenerateKeyPair]
    assert len(lines) == 1


@pytest.mark.asyncio
async def test_interactive_stops_on_end_of_input(make_session, node) -> None:
    async def read_line():
        return None

    await run_interactive(make_session(), read_line, print)
    assert node.requests == []


@pytest.mark.asyncio
async def test_run_one_reports_remote_error(make_session) -> None:
    lines: list[str] = []
    assert not await run_one(make_session(), f"exportpub {KEY_HEX}", lines.append)
    assert lines == ["Error executing command: error response to exportpub: code 404: key not found"]


@pytest.mark.asyncio
async def test_batch_continues_after_encoder_failure(make_session, node, console_config, monkeypatch, tmp_path) -> None:
    class FailingEncoder:
        def encode_call(self, function_signature, named_params, header_fields):
            raise RuntimeError("abi boom")

    monkeypatch.setattr("valconsole.election.bid.load_object", lambda ref: FailingEncoder())
    config = console_config.model_copy(update={"bid_encoding": "abi", "abi_encoder": "elector_abi:encoder"})
    lines: list[str] = []

    failures = await run_batch(
        make_session(config=config),
        [f"election-bid {NOW + 600} {NOW + 100_000} {tmp_path / 'bid.boc'}", "getstats"],
        lines.append,
    )

    assert failures == 1
    assert lines[0].startswith("Error executing command: can't encode process_new_stake call: abi boom")
    assert '"sync_status"' in lines[1]
    assert node.requested()[-1] is tl.GetStats


@pytest.mark.asyncio
async def test_run_one_reports_unexpected_exception(make_session, monkeypatch) -> None:
    session = make_session()

    async def explode(line):
        raise RuntimeError("boom")

    monkeypatch.setattr(session, "execute", explode)
    lines: list[str] = []
    assert not await run_one(session, "getstats", lines.append)
    assert lines == ["Error executing command: boom"]

"""Extract a single blockchain configuration parameter from a state snapshot."""

from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Sequence

from loguru import logger
from pytoniq_core import Cell

from valconsole.control.params import parse_int, parse_str
from valconsole.state.cells import load_config_params
from valconsole.utils.exceptions import (
    ConsoleError,
    FormatError,
    NotFoundError,
    StructureError,
    ValidationError,
)
from valconsole.utils.helpers import write_artifact

DEFAULT_CONFIG_PARAM_PATH = "config-param.boc"


def load_state_snapshot(path: str | Path) -> Cell:
    """Read a JSON snapshot ``{"boc": "<base64>"}`` and return the state root cell."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise FormatError(f"Can't read zerostate json file {path} : {exc}", name="zerostate.json") from exc
    try:
        snapshot = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormatError(f"Can't parse read zerostate json file: {exc}", name="zerostate.json") from exc
    boc = snapshot.get("boc") if isinstance(snapshot, dict) else None
    if not isinstance(boc, str):
        raise FormatError('Can\'t parse read zerostate json file: expected a "boc" string', name="zerostate.json")
    try:
        return Cell.one_from_boc(base64.b64decode(boc, validate=True))
    except binascii.Error as exc:
        raise FormatError(f"Can't parse read zerostate json file: {exc}", name="zerostate.json") from exc
    except Exception as exc:
        raise FormatError(f"Can't deserialize zerostate: {exc}", name="zerostate.json") from exc


def extract_config_param(index: int, state: Cell) -> Cell:
    """Return the cell of config param ``index`` from a masterchain state root."""
    if index < 0:
        raise ValidationError("<index> must not be a negative integer", field="index")
    try:
        params = load_config_params(state)
    except ConsoleError:
        raise
    except Exception as exc:
        raise StructureError(f"Can't read config param {index} from zerostate: {exc}") from exc
    entry = params.get(index)
    if entry is None:
        raise NotFoundError("config param", str(index))
    if not entry.remaining_refs:
        raise FormatError(f"Can't parse config param {index}: wrong format - no reference")
    return entry.load_ref()


def process_config_param(params: Sequence[str]) -> tuple[str, bytes]:
    """config_param <index> <zerostate.json> [output path]"""
    params = list(params)
    index = parse_int(params[0] if params else None, "index")
    if index < 0:
        raise ValidationError("<index> must not be a negative integer", field="index")
    snapshot = parse_str(params[1] if len(params) > 1 else None, "zerostate.json")
    path = params[2] if len(params) > 2 else DEFAULT_CONFIG_PARAM_PATH

    data = extract_config_param(index, load_state_snapshot(snapshot)).to_boc()
    write_artifact(path, data)
    logger.debug(f"config param {index}: {len(data)} bytes")
    return f"Config param {index} saved to path {path}", data

"""Read-only walks over a masterchain state tree."""

from __future__ import annotations

from pytoniq_core import Cell, Slice

from valconsole.utils.exceptions import StructureError

MC_STATE_EXTRA_TAG = 0xCC26
STATE_CUSTOM_REF = 3  # out_msg_queue_info, accounts, overload history, custom
CONFIG_PARAM_KEY_BITS = 32


def load_config_params_root(state: Cell) -> Cell:
    """Locate the ConfigParams dictionary inside McStateExtra of a state root."""
    if len(state.refs) <= STATE_CUSTOM_REF:
        raise StructureError("Can't find McStateExtra in zerostate")
    cs = state.refs[STATE_CUSTOM_REF].begin_parse()
    tag = cs.load_uint(16)
    if tag != MC_STATE_EXTRA_TAG:
        raise StructureError(f"Can't read McStateExtra from zerostate: unexpected tag {tag:#06x}")
    if cs.load_bit():
        cs.load_ref()  # shard_hashes
    cs.load_uint(256)  # config_addr
    return cs.load_ref()


def load_config_params(state: Cell) -> dict[int, Slice]:
    """All config params of a state root, keyed by index; values are the leaf slices."""
    params = load_config_params_root(state).begin_parse().load_hashmap(CONFIG_PARAM_KEY_BITS)
    if params is None:
        raise StructureError("Can't read ConfigParams from zerostate: dictionary is not an ordinary cell")
    return params

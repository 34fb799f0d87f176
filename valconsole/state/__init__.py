"""Masterchain state snapshot readers."""

from valconsole.state.cells import load_config_params, load_config_params_root
from valconsole.state.config_param import extract_config_param, load_state_snapshot, process_config_param

__all__ = [
    "extract_config_param",
    "load_config_params",
    "load_config_params_root",
    "load_state_snapshot",
    "process_config_param",
]

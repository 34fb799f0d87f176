"""Election bid workflow and submission payloads."""

from valconsole.election.bid import (
    ElectionBid,
    process_election_bid,
    process_recover_stake,
    run_election_bid,
)
from valconsole.election.payload import build_fixed_payload, build_signing_payload

__all__ = [
    "ElectionBid",
    "build_fixed_payload",
    "build_signing_payload",
    "process_election_bid",
    "process_recover_stake",
    "run_election_bid",
]

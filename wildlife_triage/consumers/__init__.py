"""Downstream consumers of a route result."""

from wildlife_triage.consumers.blocks import Block
from wildlife_triage.consumers.instructions import CuratedInstructions, InstructionSteps
from wildlife_triage.consumers.public_health import (
    PublicHealthDirectory,
    enrich_dispatch_steps,
)
from wildlife_triage.consumers.referral import (
    ReferralDirectory,
    ReferralResult,
    referral_needed,
)

__all__ = [
    "Block",
    "CuratedInstructions",
    "InstructionSteps",
    "PublicHealthDirectory",
    "ReferralDirectory",
    "ReferralResult",
    "enrich_dispatch_steps",
    "referral_needed",
]

"""
FOS Command Layer — Policy Outcomes
======================================
Policies never raise for business outcomes; they explain them.
"""

from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "ReasonCode",
    "RejectionReason",
]

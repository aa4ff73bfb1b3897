"""
FOS Command Layer — Rejection Model
======================================
Structured rejection reasons returned by engine policies.

A policy returns either None (allowed) or a RejectionReason.
Services decide whether a rejection degrades to a default value
(pure calculators) or surfaces as an error (state machines,
immutability guards).

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a policy rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'BELOW_POINT_THRESHOLD').
        message:     Human-readable explanation.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes. Extensible by engines.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Discount ──────────────────────────────────────────────
    DISCOUNT_NOT_ELIGIBLE = "DISCOUNT_NOT_ELIGIBLE"
    DISCOUNT_RATE_OUT_OF_RANGE = "DISCOUNT_RATE_OUT_OF_RANGE"

    # ── Loyalty ───────────────────────────────────────────────
    NO_CUSTOMER_SELECTED = "NO_CUSTOMER_SELECTED"
    BELOW_POINT_THRESHOLD = "BELOW_POINT_THRESHOLD"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"

    # ── Delivery ──────────────────────────────────────────────
    BRANCH_REQUIRED_FOR_DELIVERY = "BRANCH_REQUIRED_FOR_DELIVERY"
    NOT_A_DELIVERY = "NOT_A_DELIVERY"

    # ── Calendar ──────────────────────────────────────────────
    DERIVED_ENTRY_READ_ONLY = "DERIVED_ENTRY_READ_ONLY"
    HEADQUARTERS_NOTICE_READ_ONLY = "HEADQUARTERS_NOTICE_READ_ONLY"
    NOT_BRANCH_MEMBER = "NOT_BRANCH_MEMBER"
    ROLE_NOT_PERMITTED = "ROLE_NOT_PERMITTED"

    # ── Fulfillment ───────────────────────────────────────────
    SYSTEM_GENERATED_ORDER = "SYSTEM_GENERATED_ORDER"

    # ── Orders ────────────────────────────────────────────────
    NEGATIVE_TOTAL = "NEGATIVE_TOTAL"
    NOT_SPLIT_PAYMENT = "NOT_SPLIT_PAYMENT"

    # ── Outsource ─────────────────────────────────────────────
    OUTSOURCE_CLOSED = "OUTSOURCE_CLOSED"

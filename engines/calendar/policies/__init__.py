"""
FOS Calendar Engine — Policies
==============================
Who may change which calendar entry.

Derived entries are read-only for everyone. For manual entries:
- headquarters admins may edit and delete anything;
- branch managers may create entries, and may change entries they
  wrote, entries written at their branch, or entries filed under
  their branch, but never a headquarters notice;
- every other role is read-only.
"""

from typing import Optional

from core.commands.rejection import ReasonCode, RejectionReason
from engines.calendar.models import ENTRY_NOTICE, CalendarEntry, Viewer


def derived_entry_policy(entry: CalendarEntry) -> Optional[RejectionReason]:
    """Entries synthesized from orders or payment schedules are read-only."""
    if entry.is_derived:
        return RejectionReason(
            code=ReasonCode.DERIVED_ENTRY_READ_ONLY,
            message=f"Entry '{entry.entry_id}' is generated from {entry.origin.label}.",
            policy_name="derived_entry_policy",
        )
    return None


def _branch_owns(entry: CalendarEntry, viewer: Viewer) -> bool:
    if viewer.uid and entry.created_by == viewer.uid:
        return True
    if viewer.branch and entry.created_by_branch == viewer.branch:
        return True
    return bool(viewer.branch) and entry.branch_name == viewer.branch


def entry_permission_policy(
    entry: Optional[CalendarEntry],
    viewer: Viewer,
) -> Optional[RejectionReason]:
    """Role rules for creating (entry=None) or changing a manual entry."""
    if viewer.is_admin:
        return None

    if not viewer.is_branch_manager:
        return RejectionReason(
            code=ReasonCode.ROLE_NOT_PERMITTED,
            message=f"Role {viewer.role!r} cannot change calendar entries.",
            policy_name="entry_permission_policy",
        )

    if entry is None:
        return None

    if entry.type == ENTRY_NOTICE and entry.is_headquarters_scope:
        return RejectionReason(
            code=ReasonCode.HEADQUARTERS_NOTICE_READ_ONLY,
            message="Headquarters notices can only be changed by headquarters.",
            policy_name="entry_permission_policy",
        )

    if not _branch_owns(entry, viewer):
        return RejectionReason(
            code=ReasonCode.NOT_BRANCH_MEMBER,
            message=f"Entry '{entry.entry_id}' belongs to branch '{entry.branch_name}'.",
            policy_name="entry_permission_policy",
        )
    return None


def can_edit_entry(entry: Optional[CalendarEntry], viewer: Viewer) -> bool:
    if entry is not None and derived_entry_policy(entry) is not None:
        return False
    return entry_permission_policy(entry, viewer) is None


def can_delete_entry(entry: Optional[CalendarEntry], viewer: Viewer) -> bool:
    if entry is None or derived_entry_policy(entry) is not None:
        return False
    return entry_permission_policy(entry, viewer) is None

"""Static permission catalog and default grants for system roles.

The catalog is seeded into the ``permissions`` table by
``scripts/seed_permissions.py``. Default grants are written lazily per
company the first time the company's permissions are resolved.
"""

from src.models.company import MemberRole

# (code, description). Area and action are derived from the code.
PERMISSION_CATALOG: list[tuple[str, str]] = [
    # Meetings
    ("meetings.view", "View meetings you are invited to"),
    ("meetings.view_all", "View all meetings in the company"),
    ("meetings.create", "Create meetings"),
    ("meetings.edit", "Edit meetings"),
    ("meetings.delete", "Delete meetings"),
    ("meetings.start_live", "Start live meeting sessions"),
    # Action items
    ("action_items.view", "View action items you are involved in"),
    ("action_items.view_all", "View all action items in the company"),
    ("action_items.create", "Create action items"),
    ("action_items.edit", "Edit action items"),
    ("action_items.delete", "Delete action items"),
    ("action_items.complete", "Mark action items complete"),
    # Resolutions
    ("resolutions.view", "View resolutions"),
    ("resolutions.create", "Create resolutions"),
    ("resolutions.edit", "Edit resolutions"),
    ("resolutions.delete", "Delete resolutions"),
    ("resolutions.change_status", "Change resolution status"),
    # Documents
    ("documents.view", "View documents"),
    ("documents.upload", "Upload documents"),
    ("documents.download", "Download documents"),
    ("documents.delete", "Delete documents"),
    # Financials
    ("financials.view", "View financial data"),
    ("financials.edit", "Edit financial data"),
    ("financials.manage_pdfs", "Upload/delete financial PDFs"),
    # Members
    ("members.view", "View company members"),
    ("members.invite", "Invite new members"),
    ("members.remove", "Remove members"),
    ("members.change_roles", "Change member roles"),
    # Company
    ("company.view_settings", "View company settings"),
    ("company.edit_settings", "Edit company settings"),
    # OKRs
    ("okrs.view", "View OKR periods, objectives, and key results"),
    ("okrs.create", "Create OKR periods and objectives"),
    ("okrs.edit", "Edit objectives and update key result values"),
    ("okrs.delete", "Delete OKR periods, objectives, and key results"),
    ("okrs.close", "Close and reopen OKR periods"),
    # Org chart
    ("team.view", "View organization chart"),
    ("team.create", "Create roles in org chart"),
    ("team.edit", "Edit roles in org chart"),
    ("team.delete", "Delete roles from org chart"),
]


def catalog_rows() -> list[dict[str, str]]:
    """Build ``permissions`` table rows from the static catalog."""
    rows = []
    for code, description in PERMISSION_CATALOG:
        area, action = code.split(".", 1)
        rows.append({"code": code, "area": area, "action": action, "description": description})
    return rows


# OWNER bypasses every check and has no stored grants.
DEFAULT_ROLE_PERMISSIONS: dict[MemberRole, list[str]] = {
    MemberRole.OWNER: [],
    MemberRole.ADMIN: [
        "meetings.view",
        "meetings.view_all",
        "meetings.create",
        "meetings.edit",
        "meetings.delete",
        "meetings.start_live",
        "action_items.view",
        "action_items.view_all",
        "action_items.create",
        "action_items.edit",
        "action_items.delete",
        "action_items.complete",
        "resolutions.view",
        "resolutions.create",
        "resolutions.edit",
        "resolutions.delete",
        "resolutions.change_status",
        "documents.view",
        "documents.upload",
        "documents.download",
        "documents.delete",
        "financials.view",
        "financials.edit",
        "financials.manage_pdfs",
        "okrs.view",
        "okrs.create",
        "okrs.edit",
        "okrs.delete",
        "okrs.close",
        "members.view",
        "members.invite",
        "members.remove",
        "company.view_settings",
        "company.edit_settings",
    ],
    MemberRole.BOARD_MEMBER: [
        "meetings.view",
        "meetings.create",
        "meetings.edit",
        "meetings.start_live",
        "action_items.view",
        "action_items.create",
        "action_items.edit",
        "action_items.complete",
        "resolutions.view",
        "resolutions.create",
        "resolutions.edit",
        "resolutions.change_status",
        "documents.view",
        "documents.upload",
        "documents.download",
        "financials.view",
        "financials.edit",
        "financials.manage_pdfs",
        "okrs.view",
        "okrs.edit",
        "members.view",
        "company.view_settings",
    ],
    MemberRole.OBSERVER: [
        "meetings.view",
        "action_items.view",
        "resolutions.view",
        "documents.view",
        "documents.download",
        "financials.view",
        "okrs.view",
        "members.view",
        "company.view_settings",
    ],
}

# Roles whose grants are stored and editable per company.
EDITABLE_SYSTEM_ROLES = [MemberRole.ADMIN, MemberRole.BOARD_MEMBER, MemberRole.OBSERVER]

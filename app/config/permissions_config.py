"""
Dashboard features and role defaults.
Feature keys are the capability strings checked by the permission evaluator.
Used by the evaluator at request time and by the seed script to populate
dashboard_features / dashboard_role_permissions.
"""

ROLES = ("employee", "manager", "super_admin", "platform_admin")

# Roles an organization can configure in dashboard_role_permissions
CONFIGURABLE_ROLES = ("employee", "manager", "super_admin")

# feature_key -> metadata
FEATURES = {
    # Leads
    "view_own_leads": {"name": "View own leads", "category": "leads"},
    "view_team_leads": {"name": "View team leads", "category": "leads"},
    "view_all_leads": {"name": "View all leads", "category": "leads"},
    "create_leads": {"name": "Create leads", "category": "leads"},
    "edit_own_leads": {"name": "Edit own leads", "category": "leads"},
    "edit_team_leads": {"name": "Edit team leads", "category": "leads"},
    "edit_all_leads": {"name": "Edit all leads", "category": "leads"},
    "delete_leads": {"name": "Delete leads", "category": "leads"},
    "assign_leads": {"name": "Assign leads", "category": "leads"},
    # Inventory
    "view_projects": {"name": "View projects", "category": "inventory"},
    "create_projects": {"name": "Create projects", "category": "inventory"},
    "view_inventory": {"name": "View inventory", "category": "inventory"},
    "manage_inventory": {"name": "Manage inventory", "category": "inventory"},
    # Calling
    "view_call_logs": {"name": "View call logs", "category": "calls"},
    # Administration
    "view_users": {"name": "View users", "category": "team"},
    "manage_users": {"name": "Manage users", "category": "team"},
    "manage_permissions": {"name": "Manage permissions", "category": "team"},
    "view_audit_logs": {"name": "View audit logs", "category": "settings"},
    "manage_settings": {"name": "Manage organization settings", "category": "settings"},
}

ALL_FEATURE_KEYS = frozenset(FEATURES)

_EMPLOYEE = frozenset({
    "view_own_leads",
    "create_leads",
    "edit_own_leads",
    "view_projects",
    "view_inventory",
    "view_call_logs",
})

_MANAGER = _EMPLOYEE | frozenset({
    "view_team_leads",
    "view_all_leads",
    "edit_team_leads",
    "edit_all_leads",
    "assign_leads",
    "create_projects",
    "manage_inventory",
    "view_users",
    "view_audit_logs",
})

DEFAULT_ROLE_PERMISSIONS = {
    "employee": _EMPLOYEE,
    "manager": _MANAGER,
    "super_admin": ALL_FEATURE_KEYS,
    "platform_admin": ALL_FEATURE_KEYS,
}


def get_default_role_permissions(role):
    """Static feature set for a role; unknown roles get nothing."""
    return DEFAULT_ROLE_PERMISSIONS.get(role, frozenset())


def get_features_by_category():
    grouped = {}
    for key, meta in sorted(FEATURES.items(), key=lambda item: (item[1]["category"], item[1]["name"])):
        grouped.setdefault(meta["category"], []).append({"feature_key": key, **meta})
    return grouped


def get_permission_matrix():
    """
    Returns seedable rows.
    Format: {
        "features": [
            {"feature_key": "view_own_leads", "feature_name": "...", "category": "leads", "is_active": True},
            ...
        ],
        "role_permissions": [
            {"role": "employee", "feature_key": "view_own_leads", "is_enabled": True},
            ...
        ]
    }
    """
    features = [
        {
            "feature_key": key,
            "feature_name": meta["name"],
            "category": meta["category"],
            "is_active": True,
        }
        for key, meta in FEATURES.items()
    ]

    role_permissions = []
    for role in CONFIGURABLE_ROLES:
        granted = get_default_role_permissions(role)
        for key in sorted(FEATURES):
            role_permissions.append({
                "role": role,
                "feature_key": key,
                "is_enabled": key in granted,
            })

    return {
        "features": features,
        "role_permissions": role_permissions,
    }


PERMISSION_MATRIX = get_permission_matrix()

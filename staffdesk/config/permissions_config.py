"""
Permissions and Roles Configuration
This config defines the permission catalog for every staff module and the role templates built from it.
Used by the seed script and by GET /api/v1/permissions/catalog.

Codes use the canonical "module:action" form.
"""

# Define modules and their actions
MODULES = {
    "flags": {
        "actions": ["view", "create", "edit", "delete", "manage"],
        "description": "Feature flag management"
    },
    "suppliers": {
        "actions": ["view"],
        "description": "Supplier directory"
    },
    "incidents": {
        "actions": ["view"],
        "description": "Incident reports"
    },
    "inventory": {
        "actions": ["view", "create", "edit"],
        "description": "Inventory tracking"
    },
    "locations": {
        "actions": ["view", "create", "edit", "delete", "manage_users", "manage_permissions", "manage_flags"],
        "description": "Location management"
    },
    "orders": {
        "actions": ["view", "create", "edit", "send_order", "approve"],
        "description": "Purchase orders"
    },
    "tasks": {
        "actions": ["view", "create", "edit"],
        "description": "Staff tasks"
    },
    "technicians": {
        "actions": ["view"],
        "description": "Technician directory"
    },
    "users": {
        "actions": ["view", "create", "edit", "delete", "manage"],
        "description": "Staff user management"
    },
    "roles": {
        "actions": ["view", "manage"],
        "description": "Role and permission management"
    },
}

# Role templates per module
ROLE_TYPES = {
    "ADMIN": {
        "actions": None,  # every action of the module
        "description": "Full administrative access to the module"
    },
    "VIEWER": {
        "actions": ["view"],
        "description": "Read-only access to the module"
    }
}

# Descriptions that differ from the generated "<Action> <module>" text
MODULE_SPECIFIC_PERMISSIONS = {
    "orders": {
        "send_order": "Send an order to the supplier",
        "approve": "Approve a pending order"
    },
    "locations": {
        "manage_users": "Assign staff to a location",
        "manage_permissions": "Edit permission overrides for location staff",
        "manage_flags": "Toggle feature flags for a location"
    },
    "users": {
        "manage": "Assign roles and permission overrides"
    },
    "roles": {
        "manage": "Create roles and edit their permissions"
    }
}

# Organization-wide roles seeded alongside the per-module templates
ORG_ROLES = {
    "admin": {
        "name": "Administrator",
        "permissions": ["*"]
    },
    "staff": {
        "name": "Staff",
        "permissions": ["tasks:view", "tasks:create", "inventory:view", "orders:view"]
    }
}


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and their associated roles
    Format: {
        "permissions": [
            {"code": "users:create", "module": "users", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {
                "code": "users_admin",
                "name": "...",
                "description": "...",
                "permissions": ["users:create", "users:view", ...]
            },
            ...
        ]
    }
    """
    permissions = [{
        "code": "*",
        "module": "*",
        "action": "*",
        "description": "Every action in every module"
    }]
    roles = []

    for module, module_config in MODULES.items():
        permissions.append({
            "code": f"{module}:*",
            "module": module,
            "action": "*",
            "description": f"Every {module} action"
        })
        for action in module_config["actions"]:
            description = f"{action.replace('_', ' ').capitalize()} {module}"
            if action in MODULE_SPECIFIC_PERMISSIONS.get(module, {}):
                description = MODULE_SPECIFIC_PERMISSIONS[module][action]

            permissions.append({
                "code": f"{module}:{action}",
                "module": module,
                "action": action,
                "description": description
            })

    for code, role_config in ORG_ROLES.items():
        roles.append({
            "code": code,
            "name": role_config["name"],
            "description": f"{role_config['name']} for the whole organization",
            "permissions": sorted(role_config["permissions"])
        })

    for module, module_config in MODULES.items():
        for role_type, role_config in ROLE_TYPES.items():
            allowed = role_config["actions"]
            actions = [a for a in module_config["actions"] if allowed is None or a in allowed]
            roles.append({
                "code": f"{module}_{role_type.lower()}",
                "name": f"{module.capitalize()} {role_type.lower()}",
                "description": f"{role_config['description']} for {module_config['description']}",
                "permissions": sorted(f"{module}:{action}" for action in actions)
            })

    return {
        "permissions": permissions,
        "roles": roles
    }


# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()

"""
Permissions and Roles Configuration
Defines the permission matrix for every module and which profile role
(`manager` or `sales`) is granted which permission.
"""

ROLE_MANAGER = "manager"
ROLE_SALES = "sales"
PROFILE_ROLES = (ROLE_SALES, ROLE_MANAGER)

# Define modules and their actions
MODULES = {
    "coupons": {
        "resource": "coupons",
        "actions": ["create", "read", "update", "delete", "reconcile"],
        "description": "Discount coupon management"
    },
    "products": {
        "resource": "products",
        "actions": ["create", "read", "update", "delete"],
        "description": "Product catalogue management"
    },
    "users": {
        "resource": "users",
        "actions": ["create", "read", "update", "delete"],
        "description": "Sales team administration"
    },
    "settings": {
        "resource": "settings",
        "actions": ["read", "update"],
        "description": "Monthly coupon limits"
    },
    "dashboard": {
        "resource": "dashboard",
        "actions": ["read"],
        "description": "Coupon statistics"
    },
    "optimize": {
        "resource": "optimize",
        "actions": ["run"],
        "description": "AI discount suggestions"
    },
}

# Additional descriptions for non-CRUD actions
MODULE_SPECIFIC_PERMISSIONS = {
    "coupons": {
        "reconcile": "Persist the expired status of overdue coupons"
    },
    "optimize": {
        "run": "Ask the AI for a discount suggestion"
    },
}

# Sales agents manage their own coupons and browse the catalogue
SALES_PERMISSIONS = [
    "coupons:create",
    "coupons:read",
    "coupons:update",
    "coupons:delete",
    "products:read",
    "dashboard:read",
]


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the permissions of each role
    Format: {
        "permissions": [
            {"name": "coupons:create", "resource": "coupons", "action": "create", "description": "..."},
            ...
        ],
        "roles": {
            "manager": ["coupons:create", ...],
            "sales": [...]
        }
    }
    """
    permissions = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]

        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]

            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    all_names = [p["name"] for p in permissions]
    return {
        "permissions": permissions,
        "roles": {
            ROLE_MANAGER: sorted(all_names),
            ROLE_SALES: sorted(n for n in SALES_PERMISSIONS if n in all_names),
        }
    }


def get_role_permissions(role: str):
    """Permission names granted to a profile role; unknown roles get none."""
    return PERMISSION_MATRIX["roles"].get(role, [])


PERMISSION_MATRIX = get_permission_matrix()

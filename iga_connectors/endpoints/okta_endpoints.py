"""
Okta management API endpoint definitions used by the governance workflow.
"""

from typing import Dict, Any


def get_okta_endpoints() -> Dict[str, Any]:
    """Get Okta endpoints configuration."""
    return {
        # 1. Groups assigned to an application
        "app_groups": {
            "list": "/api/v1/apps/{app_id}/groups",
        },

        # 2. Members of a group
        "group_users": {
            "list": "/api/v1/groups/{group_id}/users",
        },

        # 3. Remove a member from a group (revocation)
        "group_user": {
            "delete": "/api/v1/groups/{group_id}/users/{user_id}",
        },

        # 4. Connection check
        "users": {
            "list": "/api/v1/users",
        },
    }

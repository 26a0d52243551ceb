"""
Slack Web API endpoint definitions.
"""

from typing import Dict, Any


def get_slack_endpoints() -> Dict[str, Any]:
    """Get Slack endpoints configuration."""
    return {
        "base_url": "https://slack.com/api",

        "users_list": {
            "get": "/users.list",
            "page_size": 200,
        },

        "post_message": {
            "post": "/chat.postMessage",
        },
    }

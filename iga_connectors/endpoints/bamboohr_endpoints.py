"""
BambooHR endpoint definitions. Paths are relative to the per-subdomain gateway.
"""

from typing import Dict, Any


def get_bamboohr_endpoints() -> Dict[str, Any]:
    """Get BambooHR endpoints configuration."""
    return {
        "base_url": "https://{subdomain}.bamboohr.com/api/gateway.php/{subdomain}",

        # Custom report holding the roster for one worker type
        "report": {
            "get": "/v1/reports/{report_id}",
            "params": {"format": "json", "fd": "yes", "onlyCurrent": "1"},
        },

        # Connection check
        "meta_fields": {
            "get": "/v1/meta/fields",
        },
    }

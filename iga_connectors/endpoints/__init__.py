"""
Endpoint definitions for the outbound integrations.
"""

from .bamboohr_endpoints import get_bamboohr_endpoints
from .okta_endpoints import get_okta_endpoints
from .slack_endpoints import get_slack_endpoints

__all__ = ["get_okta_endpoints", "get_bamboohr_endpoints", "get_slack_endpoints"]

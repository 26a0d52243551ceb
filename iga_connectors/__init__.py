"""
IGA connectors - outbound integrations for the governance service.
Async clients for Okta, BambooHR and Slack built on aiohttp.
"""
__version__ = "1.0.0"
from .api_client import ApiClient
from .bamboohr import BambooHRClient
from .errors import UpstreamError
from .okta import OktaClient, normalize_domain
from .slack import SlackClient

__all__ = ["ApiClient", "OktaClient", "BambooHRClient", "SlackClient", "UpstreamError", "normalize_domain"]

"""Factories for the provider clients an operation opens.

Operations never construct clients directly so callers (and tests) can swap
in their own implementations with the same async-context-manager surface.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from iga_connectors import BambooHRClient, OktaClient, SlackClient

from .config import BambooHRSource, IntegrationSettings

OktaClientFactory = Callable[[IntegrationSettings], Any]
BambooHRClientFactory = Callable[[BambooHRSource], Any]
SlackClientFactory = Callable[[IntegrationSettings], Any]


@dataclass
class ClientFactories:
    okta: OktaClientFactory
    bamboohr: BambooHRClientFactory
    slack: SlackClientFactory


def default_client_factories(config_loader=None) -> ClientFactories:
    return ClientFactories(
        okta=lambda settings: OktaClient(settings.okta_domain, settings.okta_api_token, config_loader),
        bamboohr=lambda source: BambooHRClient(source.subdomain, source.api_key, config_loader),
        slack=lambda settings: SlackClient(settings.slack_bot_token, config_loader),
    )

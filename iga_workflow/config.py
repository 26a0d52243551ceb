"""Configuration helpers: static runtime config plus the per-call integration settings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from iga_connectors.config import ConfigLoader

from .errors import ConfigurationError, ValidationError
from .models import WORKER_CONTRACTOR, WORKER_EMPLOYEE, SystemSettings

SYNC_TARGETS = ("employees", "contractors", "all")


@dataclass(frozen=True)
class BambooHRSource:
    worker_type: str
    subdomain: str
    api_key: str
    report_id: str


@dataclass(frozen=True)
class IntegrationSettings:
    """Snapshot of the system_settings row, taken at the start of one operation."""

    okta_domain: str = ""
    okta_api_token: str = ""
    slack_bot_token: str = ""
    okta_auto_revocation_enabled: bool = False
    nhi_types: Tuple[str, ...] = ()
    bamboohr_emp_subdomain: str = ""
    bamboohr_emp_api_key: str = ""
    bamboohr_emp_report_id: str = ""
    bamboohr_cont_subdomain: str = ""
    bamboohr_cont_api_key: str = ""
    bamboohr_cont_report_id: str = ""

    @classmethod
    def from_row(cls, row: Optional[SystemSettings]) -> "IntegrationSettings":
        if row is None:
            return cls()
        return cls(
            okta_domain=row.okta_domain or "",
            okta_api_token=row.okta_api_token or "",
            slack_bot_token=row.slack_bot_token or "",
            okta_auto_revocation_enabled=bool(row.okta_auto_revocation_enabled),
            nhi_types=tuple(row.nhi_types or ()),
            bamboohr_emp_subdomain=row.bamboohr_emp_subdomain or "",
            bamboohr_emp_api_key=row.bamboohr_emp_api_key or "",
            bamboohr_emp_report_id=row.bamboohr_emp_report_id or "",
            bamboohr_cont_subdomain=row.bamboohr_cont_subdomain or "",
            bamboohr_cont_api_key=row.bamboohr_cont_api_key or "",
            bamboohr_cont_report_id=row.bamboohr_cont_report_id or "",
        )

    @property
    def okta_configured(self) -> bool:
        return bool(self.okta_domain and self.okta_api_token)

    def require_okta(self) -> None:
        if not self.okta_configured:
            raise ConfigurationError("Okta settings are incomplete: missing domain/token")

    def require_slack(self) -> None:
        if not self.slack_bot_token:
            raise ConfigurationError("Slack bot token is not configured")

    def bamboohr_sources(self, target: str) -> List[BambooHRSource]:
        """Credential sets for a sync target; every selected worker type must be fully configured."""
        if target not in SYNC_TARGETS:
            raise ValidationError("target must be employees, contractors, or all.")
        sources: List[BambooHRSource] = []
        if target in ("employees", "all"):
            sources.append(self._source(
                WORKER_EMPLOYEE, self.bamboohr_emp_subdomain, self.bamboohr_emp_api_key, self.bamboohr_emp_report_id
            ))
        if target in ("contractors", "all"):
            sources.append(self._source(
                WORKER_CONTRACTOR, self.bamboohr_cont_subdomain, self.bamboohr_cont_api_key, self.bamboohr_cont_report_id
            ))
        return sources

    @staticmethod
    def _source(worker_type: str, subdomain: str, api_key: str, report_id: str) -> BambooHRSource:
        if not (subdomain and api_key and report_id):
            raise ConfigurationError(f"Missing BambooHR {worker_type.lower()} settings.")
        return BambooHRSource(worker_type=worker_type, subdomain=subdomain, api_key=api_key, report_id=report_id)


@dataclass
class WorkflowSettings:
    config_loader: ConfigLoader
    database_url: str
    require_evidence_for_direct_login: bool = False
    system_actor: str = "system@iga"
    database_echo: bool = False

    @property
    def environment(self) -> str:
        return self.config_loader.environment


def load_workflow_settings(
    config_file: str = "configs/config.json",
    environment: Optional[str] = None,
    database_url: Optional[str] = None,
) -> WorkflowSettings:
    """Load workflow settings with env-var overrides."""

    config_loader = ConfigLoader(config_file=config_file, environment=environment)
    return WorkflowSettings(
        config_loader=config_loader,
        database_url=database_url or config_loader.get_database_url(),
        require_evidence_for_direct_login=bool(
            config_loader.get("governance.require_evidence_for_direct_login", False)
        ),
        system_actor=config_loader.get("governance.system_actor", "system@iga"),
        database_echo=bool(config_loader.get("database.echo", False)),
    )

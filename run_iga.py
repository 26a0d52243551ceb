"""
IGA governance command line.
Runs one governance operation against the configured store and prints the
JSON result. Exit status is 0 on success, 1 otherwise.
"""
import argparse
import json
import logging
import sys

from iga_connectors.config import ConfigLoader
from iga_workflow.errors import ValidationError
from iga_workflow.handlers import run_operation
from iga_workflow.store import coerce_setting


def _setting(pair):
    key, sep, value = pair.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
    try:
        return key, coerce_setting(key, value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser():
    parser = argparse.ArgumentParser(description="Run an IGA governance operation")
    parser.add_argument("--config-file", default="configs/config.json")
    parser.add_argument("--database-url", default=None, help="Override the configured database URL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and the settings row")

    settings = sub.add_parser("settings", help="Show or update system settings")
    settings.add_argument("pairs", nargs="*", type=_setting, help="key=value pairs to update")

    generate = sub.add_parser("generate", help="Generate an access-review campaign")
    generate.add_argument("--name", required=True)
    generate.add_argument("--start-date", required=True)
    generate.add_argument("--due-date", required=True)
    generate.add_argument("--asset-id", action="append", dest="asset_ids", help="Restrict to selected assets")

    decide = sub.add_parser("decide", help="Submit a decision on a review item")
    decide.add_argument("review_item_id")
    decide.add_argument("decision", choices=["Approved", "Revoked"])
    decide.add_argument("--actor", required=True)
    decide.add_argument("--notes", default=None, help="Evidence notes")

    delegate = sub.add_parser("delegate", help="Hand pending items to another reviewer")
    delegate.add_argument("from_reviewer")
    delegate.add_argument("to_reviewer")

    pending = sub.add_parser("pending", help="List a reviewer's pending items")
    pending.add_argument("reviewer_email")
    pending.add_argument("--campaign-id", default=None)

    audit = sub.add_parser("audit", help="Show recent audit log entries")
    audit.add_argument("--action", default=None)
    audit.add_argument("--limit", type=int, default=50)

    sync = sub.add_parser("sync-employees", help="Mirror the BambooHR roster")
    sync.add_argument("--target", default="all", choices=["employees", "contractors", "all"])

    sub.add_parser("sync-slack", help="Refresh employee Slack ids")

    groups = sub.add_parser("asset-groups", help="List an asset's Okta groups and members")
    groups.add_argument("asset_id")

    notify = sub.add_parser("notify", help="Send Slack reminders for a campaign")
    notify.add_argument("campaign_id")

    okta = sub.add_parser("test-okta", help="Check Okta credentials")
    okta.add_argument("--domain", default=None)
    okta.add_argument("--api-token", default=None)

    bamboo = sub.add_parser("test-bamboohr", help="Check BambooHR credentials")
    bamboo.add_argument("--target", default="employees", choices=["employees", "contractors", "all"])
    return parser


def operation_for(args):
    if args.command == "init-db":
        return "init_database", {}
    if args.command == "settings":
        fields = dict(args.pairs)
        return ("update_settings", fields) if fields else ("get_settings", {})
    if args.command == "generate":
        payload = {"name": args.name, "start_date": args.start_date, "due_date": args.due_date}
        if args.asset_ids:
            payload.update(scope="selected_assets", asset_ids=args.asset_ids)
        return "generate_campaign", payload
    if args.command == "decide":
        return "submit_decision", {
            "review_item_id": args.review_item_id,
            "decision": args.decision,
            "actor_email": args.actor,
            "evidence_notes": args.notes,
        }
    if args.command == "delegate":
        return "delegate_pending", {"from_reviewer": args.from_reviewer, "to_reviewer": args.to_reviewer}
    if args.command == "pending":
        return "list_pending_items", {"reviewer_email": args.reviewer_email, "campaign_id": args.campaign_id}
    if args.command == "audit":
        return "list_audit_logs", {"action": args.action, "limit": args.limit}
    if args.command == "sync-employees":
        return "sync_employees", {"target": args.target}
    if args.command == "sync-slack":
        return "sync_slack_ids", {}
    if args.command == "asset-groups":
        return "fetch_asset_groups", {"asset_id": args.asset_id}
    if args.command == "notify":
        return "notify_reviewers", {"campaign_id": args.campaign_id}
    if args.command == "test-okta":
        return "check_okta_connection", {"domain": args.domain, "api_token": args.api_token}
    return "check_bamboohr_connection", {"target": args.target}


def main(argv=None):
    args = build_parser().parse_args(argv)
    config_loader = ConfigLoader(config_file=args.config_file)
    config_loader.setup_logging()
    logging.getLogger("iga").debug(config_loader.summary())

    name, payload = operation_for(args)
    result = run_operation(name, payload, config_file=args.config_file, database_url=args.database_url)
    print(json.dumps(result, indent=2, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())

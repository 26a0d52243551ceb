import asyncio
from datetime import date

from iga_workflow.decisions import requires_evidence, submit_decision
from iga_workflow.handlers import handle
from iga_workflow.models import Asset, AuditLog, ReviewCampaign, ReviewItem

OKTA = {"okta_domain": "acme.okta.com", "okta_api_token": "token"}


def _campaign():
    return ReviewCampaign(id="c1", name="Q1", start_date=date(2024, 1, 1), due_date=date(2024, 1, 31))


def _item(item_id="i1", asset_id="a1", employee="user@co.com", status="pending", decision=None, **extra):
    return ReviewItem(
        id=item_id,
        campaign_id="c1",
        asset_id=asset_id,
        employee_email=employee,
        reviewer_email="owner@co.com",
        status=status,
        decision=decision,
        okta_group="Engineers",
        okta_group_id="g1",
        **extra,
    )


def _seed_basic(seed, login_type="SSO", okta_id="app1", **settings):
    seed(
        _campaign(),
        Asset(id="a1", name="GitHub", okta_id=okta_id, owner_email="owner@co.com", login_type=login_type),
        _item(),
        **{**OKTA, **settings},
    )


def test_approval_marks_item_reviewed_and_writes_one_audit_entry(ctx, run, seed, query):
    _seed_basic(seed)

    result = run(handle(ctx, "submit_decision", {
        "review_item_id": "i1", "decision": "Approved", "actor_email": "Owner@Co.com",
    }))

    assert result["success"] is True
    item = query(ReviewItem)[0]
    assert (item.status, item.decision) == ("reviewed", "Approved")
    assert item.reviewed_at is not None
    entries = query(AuditLog)
    assert len(entries) == 1
    entry = entries[0]
    assert (entry.actor_email, entry.target_user, entry.asset_name) == ("owner@co.com", "user@co.com", "GitHub")
    assert (entry.action, entry.decision) == ("review_item_decision", "Approved")
    assert entry.details["review_item_id"] == "i1"


def test_decision_on_reviewed_item_conflicts_without_side_effects(ctx, run, seed, query):
    seed(
        _campaign(),
        Asset(id="a1", name="GitHub", okta_id="app1", owner_email="owner@co.com"),
        _item(status="reviewed", decision="Approved"),
        **OKTA,
    )

    for decision in ("Approved", "Revoked"):
        result = run(handle(ctx, "submit_decision", {
            "review_item_id": "i1", "decision": decision, "actor_email": "owner@co.com",
        }))
        assert result["success"] is False
        assert result["status"] == 409

    assert query(ReviewItem)[0].decision == "Approved"
    assert query(AuditLog) == []


def test_self_approval_is_forbidden_regardless_of_case(ctx, run, seed, query):
    seed(
        _campaign(),
        Asset(id="a1", name="GitHub", okta_id="app1", owner_email="alice@x.com"),
        _item(employee="alice@x.com"),
        **OKTA,
    )

    result = run(handle(ctx, "submit_decision", {
        "review_item_id": "i1", "decision": "Approved", "actor_email": "Alice@X.com",
    }))

    assert result["success"] is False
    assert result["status"] == 403
    assert query(ReviewItem)[0].status == "pending"
    assert query(AuditLog) == []


def test_reviewer_may_revoke_their_own_access(ctx, run, seed, query):
    seed(
        _campaign(),
        Asset(id="a1", name="GitHub", okta_id="app1", owner_email="alice@x.com"),
        _item(employee="alice@x.com"),
        **OKTA,
    )

    result = run(submit_decision(ctx, "i1", "Revoked", "ALICE@x.com"))

    assert result["decision"] == "Revoked"
    assert query(ReviewItem)[0].decision == "Revoked"


def test_unknown_item_and_bad_input(ctx, run, seed):
    _seed_basic(seed)

    missing = run(handle(ctx, "submit_decision", {
        "review_item_id": "nope", "decision": "Approved", "actor_email": "owner@co.com",
    }))
    wrong_vocabulary = run(handle(ctx, "submit_decision", {
        "review_item_id": "i1", "decision": "Keep", "actor_email": "owner@co.com",
    }))
    no_actor = run(handle(ctx, "submit_decision", {"review_item_id": "i1", "decision": "Approved"}))

    assert missing["status"] == 404
    assert wrong_vocabulary["status"] == 400
    assert no_actor["status"] == 400


def test_direct_login_assets_require_evidence_when_enabled(ctx, run, seed, query):
    ctx.settings.require_evidence_for_direct_login = True
    _seed_basic(seed, login_type="Local", okta_id=None)

    refused = run(handle(ctx, "submit_decision", {
        "review_item_id": "i1", "decision": "Approved", "actor_email": "owner@co.com", "evidence_notes": "   ",
    }))
    assert refused["status"] == 400
    assert query(ReviewItem)[0].status == "pending"

    accepted = run(submit_decision(ctx, "i1", "Approved", "owner@co.com", evidence_notes=" Checked console export "))
    assert accepted["decision"] == "Approved"
    assert query(ReviewItem)[0].evidence_notes == "Checked console export"


def test_federated_swa_asset_is_approved_without_notes_by_default(ctx, run, seed, fakes, query):
    seed(Asset(id="a1", name="Jira", okta_id="app1", owner_email="owner@co.com", login_type="SWA"), **OKTA)
    fakes.okta.add_group("app1", "g1", "Jira Users", ["user@co.com"])
    campaign = run(handle(ctx, "generate_campaign", {
        "name": "Q1 Review", "start_date": "2024-01-01", "due_date": "2024-01-31",
    }))
    item_id = query(ReviewItem)[0].id

    result = run(handle(ctx, "submit_decision", {
        "review_item_id": item_id, "decision": "Approved", "actor_email": "owner@co.com",
    }))

    assert campaign["created_review_items"] == 1
    assert result["success"] is True
    assert query(ReviewItem)[0].decision == "Approved"


def test_concurrent_decisions_on_one_item_conflict(ctx, run, seed, query):
    _seed_basic(seed)

    async def decide_twice():
        return await asyncio.gather(
            handle(ctx, "submit_decision", {"review_item_id": "i1", "decision": "Approved", "actor_email": "owner@co.com"}),
            handle(ctx, "submit_decision", {"review_item_id": "i1", "decision": "Revoked", "actor_email": "owner@co.com"}),
        )

    results = run(decide_twice())

    assert sorted(result["success"] for result in results) == [False, True]
    loser = next(result for result in results if not result["success"])
    winner = next(result for result in results if result["success"])
    assert loser["status"] == 409
    assert query(ReviewItem)[0].decision == winner["decision"]
    assert len(query(AuditLog, AuditLog.action == "review_item_decision")) == 1


def test_requires_evidence_by_login_type():
    assert requires_evidence("Local")
    assert requires_evidence("SWA")
    assert requires_evidence("Empty")
    assert requires_evidence(None)
    assert not requires_evidence("SSO")
    assert not requires_evidence("sso")


def test_revocation_is_skipped_and_audited_when_disabled(ctx, run, seed, fakes, query):
    _seed_basic(seed, okta_auto_revocation_enabled=False)

    result = run(submit_decision(ctx, "i1", "Revoked", "owner@co.com"))

    assert result["revocation"]["status"] == "skipped"
    assert "warning" not in result
    assert fakes.okta.removed == []
    actions = sorted(entry.action for entry in query(AuditLog))
    assert actions == ["okta_revoke_access", "review_item_decision"]


def test_revocation_removes_member_from_group_when_enabled(ctx, run, seed, fakes, query):
    _seed_basic(seed, okta_auto_revocation_enabled=True)
    fakes.okta.add_group("app1", "g1", "Engineers", ["user@co.com", "other@co.com"])

    result = run(submit_decision(ctx, "i1", "Revoked", "owner@co.com"))

    assert result["revocation"]["status"] == "removed"
    assert fakes.okta.removed == [("g1", "u-user@co.com")]
    revoke_entry = query(AuditLog, AuditLog.action == "okta_revoke_access")[0]
    assert revoke_entry.actor_email == "system@iga"
    assert revoke_entry.target_user == "user@co.com"
    assert revoke_entry.details["outcome"] == "removed"


def test_failed_revocation_keeps_decision_and_warns(ctx, run, seed, fakes, query):
    _seed_basic(seed, okta_auto_revocation_enabled=True)
    fakes.okta.add_group("app1", "g1", "Engineers", ["user@co.com"])
    fakes.okta.failing.add(("remove", "g1"))

    result = run(handle(ctx, "submit_decision", {
        "review_item_id": "i1", "decision": "Revoked", "actor_email": "owner@co.com",
    }))

    assert result["success"] is True
    assert result["revocation"]["status"] == "failed"
    assert "warning" in result
    assert query(ReviewItem)[0].status == "reviewed"
    assert query(AuditLog, AuditLog.action == "okta_revoke_access")[0].details["outcome"] == "failed"


def test_revocation_of_member_no_longer_in_group(ctx, run, seed, fakes):
    _seed_basic(seed, okta_auto_revocation_enabled=True)
    fakes.okta.add_group("app1", "g1", "Engineers", ["someone-else@co.com"])

    result = run(submit_decision(ctx, "i1", "Revoked", "owner@co.com"))

    assert result["revocation"]["status"] == "user_not_found"
    assert fakes.okta.removed == []


def test_approval_never_triggers_revocation(ctx, run, seed, fakes, query):
    _seed_basic(seed, okta_auto_revocation_enabled=True)

    run(submit_decision(ctx, "i1", "Approved", "owner@co.com"))

    assert fakes.okta.calls == []
    assert [entry.action for entry in query(AuditLog)] == ["review_item_decision"]


def test_standalone_revocation_by_group(ctx, run, seed, fakes, query):
    _seed_basic(seed, okta_auto_revocation_enabled=True)
    fakes.okta.add_group("app1", "g7", "Other", ["user@co.com"])

    result = run(handle(ctx, "revoke_access", {"review_item_id": "i1", "group_id": "g7"}))

    assert result["success"] is True
    assert fakes.okta.removed == [("g7", "u-user@co.com")]
    assert query(ReviewItem)[0].status == "pending"


def test_reviewed_status_always_carries_a_decision(ctx, run, seed, query):
    seed(
        _campaign(),
        Asset(id="a1", name="GitHub", okta_id="app1", owner_email="owner@co.com"),
        _item("i1"), _item("i2", employee="b@co.com"), _item("i3", employee="c@co.com"),
        **OKTA,
    )
    run(submit_decision(ctx, "i1", "Approved", "owner@co.com"))
    run(submit_decision(ctx, "i3", "Revoked", "owner@co.com"))

    for item in query(ReviewItem):
        assert (item.status == "reviewed") == (item.decision is not None)

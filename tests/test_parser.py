from datetime import date

from iga_workflow.parser import Parser, normalize_email, parse_date, pick


def test_pick_returns_first_non_blank_string():
    record = {"workEmail": "  ", "email": None, "Email": " ann@co.com ", "Work Email": "other@co.com"}
    assert pick(record, ("workEmail", "email", "Email", "Work Email")) == "ann@co.com"
    assert pick({"91": 42}, ("91", "manager")) == ""


def test_parse_date_formats():
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    assert parse_date("2024-02-29T10:00:00Z") == date(2024, 2, 29)
    assert parse_date("03/15/2022") == date(2022, 3, 15)
    assert parse_date("0000-00-00") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_normalize_email():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
    assert normalize_email(None) == ""


def test_parse_group_falls_back_to_id_for_name():
    parser = Parser()
    assert parser.parse_group({"id": "g1", "profile": {"name": "Admins"}}).name == "Admins"
    assert parser.parse_group({"id": "g2"}).name == "g2"


def test_parse_members_uses_login_and_drops_unresolvable():
    members = Parser().parse_members([
        {"id": "u1", "profile": {"email": "Ann@Co.com", "login": "ann.login@co.com"}},
        {"id": "u2", "profile": {"login": "Ben@co.com"}},
        {"id": "u3", "profile": {}},
        {"id": "u4"},
    ])
    assert [(m.id, m.email) for m in members] == [("u1", "ann@co.com"), ("u2", "ben@co.com")]


def test_parse_employee_maps_fallback_keys():
    record = Parser().parse_employee(
        {
            "Work Email": "Kim@Co.com",
            "employeeName": "Kim Lee",
            "title": "Designer",
            "Department": "Product",
            "managerName": "Ann",
            "employmentStatus": "Active",
            "dateOfHire": "2020-01-06",
            "terminationDate": "",
        },
        "Contractor",
    )
    assert record.as_row() == {
        "email": "kim@co.com",
        "full_name": "Kim Lee",
        "role": "Designer",
        "department": "Product",
        "manager": "Ann",
        "status": "Active",
        "worker_type": "Contractor",
        "hire_date": date(2020, 1, 6),
        "end_date": None,
    }


def test_parse_employee_defaults_name_to_email_and_skips_missing_email():
    parser = Parser()
    assert parser.parse_employee({"email": "x@co.com"}, "Employee").full_name == "x@co.com"
    assert parser.parse_employees([{"displayName": "Nobody"}, {"email": "y@co.com"}], "Employee")[0].email == "y@co.com"


def test_parse_slack_members_skips_bots_and_deleted():
    identities = Parser().parse_slack_members([
        {"id": "U1", "profile": {"email": "A@co.com"}},
        {"id": "U2", "deleted": True, "profile": {"email": "b@co.com"}},
        {"id": "U3", "is_bot": True, "profile": {"email": "c@co.com"}},
        {"id": "U4", "profile": {}},
    ])
    assert [(i.id, i.email) for i in identities] == [("U1", "a@co.com")]

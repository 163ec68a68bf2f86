from datetime import datetime, timedelta, timezone

from case_intake.core.properties import RICH_TEXT_LIMIT, build_properties, iso_instant

NOW = datetime(2026, 10, 18, 9, 30, 15, 250000, tzinfo=timezone.utc)
NOW_ISO = "2026-10-18T09:30:15.250Z"


def _build(catalogue, body):
    return build_properties(catalogue.resolve(body), catalogue=catalogue, now=NOW)


def test_iso_instant_converts_to_utc():
    local = NOW.astimezone(timezone(timedelta(hours=3)))
    assert iso_instant(local) == NOW_ISO


def test_full_property_set(catalogue, valid_case):
    props = _build(catalogue, valid_case)

    assert props["CaseID"] == {"title": [{"text": {"content": "CASE-0042"}}]}
    assert props["Status"] == {"select": {"name": "New"}}
    assert props["Urgency"] == {"select": {"name": "High"}}
    assert props["Specialty"] == {"select": {"name": "Cardiology"}}
    assert props["Age"] == {"number": 57}
    assert props["Gender"] == {"select": {"name": "Female"}}
    assert props["Country"] == {"select": {"name": "Kenya"}}
    assert props["ChiefComplaint"] == {"rich_text": [{"text": {"content": "Chest pain on exertion"}}]}
    assert props["HospitalsShortlist"] == {"multi_select": [{"name": "Aga Khan"}, {"name": "Nairobi Hospital"}]}
    assert props["Budget"] == {"number": 12000}
    assert props["CreatedAt"] == {"date": {"start": NOW_ISO}}
    assert props["LastEdited"] == {"date": {"start": NOW_ISO}}
    assert props["Source"] == {"select": {"name": "GPT"}}


def test_absent_values_are_omitted(catalogue):
    body = {
        "CaseID": "C-1",
        "Status": "New",
        "Urgency": "Low",
        "Specialty": "ENT",
        "age": "",
        "budget": "about ten",
        "gender": None,
        "notes": "   ",
        "imaging": "",
        "missingInfo": " , ",
    }
    props = _build(catalogue, body)

    for name in ("Age", "Budget", "Gender", "Country", "Notes", "Imaging", "ChiefComplaint", "MissingInfo", "HospitalsShortlist"):
        assert name not in props
    assert all(value is not None for value in props.values())


def test_assigned_to_is_never_sent(catalogue, valid_case):
    props = _build(catalogue, dict(valid_case, assignedTo="Dr. Achieng", AssignedTo=["user-1"]))
    assert "AssignedTo" not in props


def test_created_at_from_caller_last_edited_always_now(catalogue, valid_case):
    body = dict(valid_case, CreatedAt="2026-01-02T03:04:05.000Z", LastEdited="2000-01-01T00:00:00Z")
    props = _build(catalogue, body)
    assert props["CreatedAt"] == {"date": {"start": "2026-01-02T03:04:05.000Z"}}
    assert props["LastEdited"] == {"date": {"start": NOW_ISO}}


def test_source_from_request_or_default(catalogue, valid_case):
    assert _build(catalogue, dict(valid_case, source="  Web form "))["Source"] == {"select": {"name": "Web form"}}
    assert _build(catalogue, dict(valid_case, source="  "))["Source"] == {"select": {"name": "GPT"}}


def test_missing_info_list(catalogue, valid_case):
    props = _build(catalogue, dict(valid_case, missingInfo=["labs", " imaging "]))
    assert props["MissingInfo"] == {"multi_select": [{"name": "labs"}, {"name": "imaging"}]}


def test_long_rich_text_is_chunked(catalogue, valid_case):
    notes = "x" * (RICH_TEXT_LIMIT + 10)
    chunks = _build(catalogue, dict(valid_case, notes=notes))["Notes"]["rich_text"]
    assert [len(chunk["text"]["content"]) for chunk in chunks] == [RICH_TEXT_LIMIT, 10]

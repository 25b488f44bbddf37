from sqlalchemy import select

from civic_tracker.models.attachment import Attachment
from civic_tracker.schemas.auth import CurrentUser
from civic_tracker.services import issue_service
from civic_tracker.services.attachment_service import is_well_formed, link_attachments

GOOD = {"filename": "1760781234567-a1b2c3.jpg", "mime": "image/jpeg", "size": 2048}


def test_well_formed_reference():
    assert is_well_formed(GOOD)
    assert is_well_formed({**GOOD, "size": 2048.0})
    assert is_well_formed({**GOOD, "size": 0})


def test_malformed_references():
    assert not is_well_formed(None)
    assert not is_well_formed("photo.jpg")
    assert not is_well_formed({"mime": "image/jpeg", "size": 10})
    assert not is_well_formed({**GOOD, "filename": ""})
    assert not is_well_formed({**GOOD, "mime": None})
    assert not is_well_formed({**GOOD, "size": "2048"})
    assert not is_well_formed({**GOOD, "size": True})


def test_malformed_references_are_dropped_silently(db):
    refs = [
        GOOD,
        {"filename": "no-size.png", "mime": "image/png"},
        {"filename": "", "mime": "image/png", "size": 1},
        "garbage",
        {"filename": "second.webp", "mime": "image/webp", "size": 512},
    ]

    issue = issue_service.create_issue(
        db,
        category="Pothole",
        description="",
        lat=12.9,
        lng=77.6,
        actor=CurrentUser(phone="9999999999", role="citizen"),
        attachments=refs,
    )

    rows = db.execute(select(Attachment).order_by(Attachment.id)).scalars().all()
    assert [(a.issue_id, a.filename, a.mime, a.size) for a in rows] == [
        (issue.id, GOOD["filename"], "image/jpeg", 2048),
        (issue.id, "second.webp", "image/webp", 512),
    ]


def test_all_references_malformed_still_creates_issue(db):
    issue = issue_service.create_issue(
        db, category="Pothole", description="", lat=1.0, lng=2.0,
        attachments=[{"filename": "x.jpg"}],
    )

    assert issue.id is not None
    assert issue.status == "Created"
    assert db.execute(select(Attachment)).scalars().all() == []


def test_sizes_that_do_not_fit_the_column_are_malformed():
    assert not is_well_formed({**GOOD, "size": float("nan")})
    assert not is_well_formed({**GOOD, "size": float("inf")})
    assert not is_well_formed({**GOOD, "size": float("-inf")})
    assert not is_well_formed({**GOOD, "size": 10**30})
    assert not is_well_formed({**GOOD, "size": 1e30})
    assert not is_well_formed({**GOOD, "size": -1})
    assert not is_well_formed({**GOOD, "size": 2048.5})
    assert is_well_formed({**GOOD, "size": 2**31 - 1})


def test_unstorable_sizes_are_dropped_and_issue_is_created(db):
    issue = issue_service.create_issue(
        db, category="Pothole", description="", lat=1.0, lng=2.0,
        attachments=[
            {**GOOD, "size": float("nan")},
            {**GOOD, "size": float("inf")},
            {**GOOD, "size": 10**30},
            GOOD,
        ],
    )

    rows = db.execute(select(Attachment)).scalars().all()
    assert [(a.issue_id, a.size) for a in rows] == [(issue.id, 2048)]


def test_non_list_attachments_link_nothing(db):
    issue = issue_service.create_issue(
        db, category="Pothole", description="", lat=1.0, lng=2.0,
        attachments=GOOD,
    )

    assert issue.status == "Created"
    assert link_attachments(db, issue.id, "photo.jpg") == []
    assert db.execute(select(Attachment)).scalars().all() == []

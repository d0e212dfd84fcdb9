from conftest import admin_header
from countercache.core.config import settings
from countercache.models import Group, GroupMember, User
from countercache.services.catalog import JOBS


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_jobs_require_token(client):
    r = client.get("/counters/jobs")
    assert r.status_code == 401

    r2 = client.get("/counters/jobs", headers=admin_header("wrong"))
    assert r2.status_code == 401


def test_api_disabled_without_configured_token(client, monkeypatch):
    monkeypatch.setattr(settings, "admin_token", "")
    r = client.get("/counters/jobs", headers=admin_header())
    assert r.status_code == 503


def test_list_jobs(client):
    r = client.get("/counters/jobs", headers=admin_header())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["total"] == len(JOBS)
    groups = next(j for j in body["items"] if j["name"] == "groups")
    assert groups["steps"] == [
        "groups.members_count from group_members",
        "groups.leaders_count from group_members",
    ]


def test_run_job(client, db):
    user = User(name="leader")
    group = Group(name="g")
    db.add_all([user, group])
    db.commit()
    db.add(GroupMember(group_id=group.id, user_id=user.id, rank=2))
    db.commit()

    r = client.post("/counters/jobs/groups", headers=admin_header())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["job"] == "groups"
    assert len(body["statements"]) == 12
    assert body["statements"][4]["sql"].startswith("UPDATE groups SET members_count")
    assert body["statements"][4]["rows"] == 1

    db.expire_all()
    assert (group.members_count, group.leaders_count) == (1, 1)


def test_run_unknown_job(client):
    r = client.post("/counters/jobs/nope", headers=admin_header())
    assert r.status_code == 404


def test_cleanup_endpoint(client):
    r = client.post("/counters/cleanup", headers=admin_header())
    assert r.status_code == 200, r.text
    assert r.json() == {"dropped": [], "failed": {}}

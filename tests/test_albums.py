"""Album lifecycle and class management."""

from sqlmodel import select

from yearbook.models.access import AlbumClassAccess, AlbumJoinRequest
from yearbook.models.album import AlbumClass, AlbumMember
from yearbook.models.invite import AlbumInvite

API = "/api/v1/albums"


def _join_class(client, users, album, who, class_index=0):
    r = client.post(f"{API}/{album['id']}/classes/{album['classes'][class_index]}/request",
                    json={"student_name": who.title()}, headers=users[who].headers)
    req_id = r.json()["request"]["id"]
    r = client.post(f"{API}/{album['id']}/join-requests/{req_id}/approve", headers=users["owner"].headers)
    assert r.status_code == 200


# --- Albums ---

def test_create_album(client, users):
    r = client.post(API, json={"name": "  Angkatan 2026  ", "students_count": 30},
                    headers=users["alice"].headers)
    assert r.status_code == 201
    data = r.json()
    assert data["name"] == "Angkatan 2026"
    assert data["owner_id"] == users["alice"].user_id
    assert data["status"] == "pending"
    assert data["students_count"] == 30


def test_create_requires_name(client, users):
    assert client.post(API, json={"name": " "}, headers=users["alice"].headers).status_code == 400


def test_create_requires_auth(client):
    assert client.post(API, json={"name": "Nope"}).status_code == 401


def test_list_my_albums(client, users, album):
    owner, alice, bob = users["owner"], users["alice"], users["bob"]
    assert [a["id"] for a in client.get(API, headers=owner.headers).json()] == [album["id"]]
    assert client.get(API, headers=alice.headers).json() == []

    _join_class(client, users, album, "alice")
    assert [a["id"] for a in client.get(API, headers=alice.headers).json()] == [album["id"]]

    client.post(f"{API}/{album['id']}/members", json={"user_id": bob.user_id, "role": "member"},
                headers=owner.headers)
    assert [a["id"] for a in client.get(API, headers=bob.headers).json()] == [album["id"]]


def test_detail_reports_role(client, users, album):
    r = client.get(f"{API}/{album['id']}", headers=users["owner"].headers)
    assert r.json()["my_role"] == "owner"
    assert r.json()["can_manage"] is True

    _join_class(client, users, album, "alice")
    r = client.get(f"{API}/{album['id']}", headers=users["alice"].headers)
    assert r.json()["my_role"] == "member"
    assert r.json()["can_manage"] is False


def test_update_by_manager_only(client, users, album):
    _join_class(client, users, album, "alice")
    r = client.patch(f"{API}/{album['id']}", json={"name": "Renamed"}, headers=users["alice"].headers)
    assert r.status_code == 403
    r = client.patch(f"{API}/{album['id']}", json={"name": "Renamed"}, headers=users["owner"].headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Renamed"


def test_status_by_global_admin_only(client, users, album):
    url = f"{API}/{album['id']}/status"
    r = client.patch(url, json={"status": "approved"}, headers=users["owner"].headers)
    assert r.status_code == 403

    r = client.patch(url, json={"status": "approved", "payment_status": "paid"},
                     headers=users["root"].headers)
    assert r.status_code == 200
    assert r.json()["status"] == "approved"
    assert r.json()["payment_status"] == "paid"

    r = client.patch(url, json={"status": "archived"}, headers=users["root"].headers)
    assert r.status_code == 400


def test_delete_cascades(client, session, users, album):
    owner = users["owner"]
    _join_class(client, users, album, "alice")
    client.post(f"{API}/{album['id']}/classes/{album['classes'][0]}/request",
                json={"student_name": "Bob"}, headers=users["bob"].headers)
    client.post(f"{API}/{album['id']}/members", json={"user_id": users["carol"].user_id, "role": "admin"},
                headers=owner.headers)
    client.post(f"{API}/{album['id']}/invites", json={"role": "member"}, headers=owner.headers)

    r = client.delete(f"{API}/{album['id']}", headers=owner.headers)
    assert r.status_code == 204
    assert client.get(f"{API}/{album['id']}", headers=owner.headers).status_code == 404

    session.expire_all()
    for model in (AlbumClass, AlbumMember, AlbumClassAccess, AlbumJoinRequest, AlbumInvite):
        rows = session.exec(select(model).where(model.album_id == album["id"])).all()
        assert rows == [], model.__name__


def test_album_admin_cannot_delete(client, users, album):
    client.post(f"{API}/{album['id']}/members", json={"user_id": users["alice"].user_id, "role": "admin"},
                headers=users["owner"].headers)
    assert client.delete(f"{API}/{album['id']}", headers=users["alice"].headers).status_code == 403


# --- Classes ---

def test_list_classes_with_counts(client, users, album):
    _join_class(client, users, album, "alice")
    _join_class(client, users, album, "bob")
    r = client.get(f"{API}/{album['id']}/classes", headers=users["owner"].headers)
    assert r.status_code == 200
    data = r.json()
    assert [c["name"] for c in data] == ["12 IPA 1", "12 IPA 2"]
    assert [c["student_count"] for c in data] == [2, 0]


def test_duplicate_class_name_conflicts(client, users, album):
    owner = users["owner"]
    r = client.post(f"{API}/{album['id']}/classes", json={"name": "12 IPA 1"}, headers=owner.headers)
    assert r.status_code == 409

    r = client.patch(f"{API}/{album['id']}/classes/{album['classes'][1]}",
                     json={"name": "12 IPA 1"}, headers=owner.headers)
    assert r.status_code == 409


def test_rename_and_reorder_class(client, users, album):
    r = client.patch(f"{API}/{album['id']}/classes/{album['classes'][1]}",
                     json={"name": "12 IPS 1", "sort_order": -1}, headers=users["owner"].headers)
    assert r.status_code == 200
    names = [c["name"] for c in client.get(f"{API}/{album['id']}/classes",
                                           headers=users["owner"].headers).json()]
    assert names == ["12 IPS 1", "12 IPA 1"]


def test_album_admin_manages_classes(client, users, album):
    client.post(f"{API}/{album['id']}/members", json={"user_id": users["alice"].user_id, "role": "admin"},
                headers=users["owner"].headers)
    r = client.post(f"{API}/{album['id']}/classes", json={"name": "12 IPS 2"}, headers=users["alice"].headers)
    assert r.status_code == 201
    assert r.json()["sort_order"] == 2


def test_student_cannot_create_class(client, users, album):
    _join_class(client, users, album, "alice")
    r = client.post(f"{API}/{album['id']}/classes", json={"name": "X"}, headers=users["alice"].headers)
    assert r.status_code == 403


def test_delete_class_drops_grants(client, session, users, album):
    _join_class(client, users, album, "alice")
    r = client.delete(f"{API}/{album['id']}/classes/{album['classes'][0]}", headers=users["owner"].headers)
    assert r.status_code == 204

    session.expire_all()
    grants = session.exec(select(AlbumClassAccess).where(AlbumClassAccess.album_id == album["id"])).all()
    assert grants == []
    req = session.exec(select(AlbumJoinRequest).where(AlbumJoinRequest.album_id == album["id"])).one()
    assert req.assigned_class_id is None


def test_delete_unknown_class(client, users, album):
    r = client.delete(f"{API}/{album['id']}/classes/cls_missing", headers=users["owner"].headers)
    assert r.status_code == 404


def test_join_stats_require_manage(client, users, album):
    _join_class(client, users, album, "alice")
    assert client.get(f"{API}/{album['id']}/join-stats", headers=users["alice"].headers).status_code == 403
    r = client.get(f"{API}/{album['id']}/join-stats", headers=users["owner"].headers)
    assert r.json()["approved_count"] == 1
    assert r.json()["pending_count"] == 0

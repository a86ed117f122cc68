from datetime import timedelta

from laid.models import Match, Message
from laid.utils import utcnow


def test_matches_listed_newest_first_with_counterpart(client, make_user, make_match, auth_headers):
    me = make_user(complete=True)
    old_flame = make_user(complete=True, display_name="Old", age=40)
    new_flame = make_user(complete=True, display_name="New", bio="Hello")
    now = utcnow()
    older = make_match(me, old_flame, created_at=now - timedelta(days=2))
    newer = make_match(new_flame, me, created_at=now - timedelta(hours=1))

    resp = client.get("/api/matches", headers=auth_headers(me))
    assert resp.status_code == 200
    body = resp.get_json()

    assert [m["matchId"] for m in body] == [newer.id, older.id]
    assert body[0]["id"] == new_flame.id
    assert body[0]["displayName"] == "New"
    assert body[0]["bio"] == "Hello"
    assert body[0]["photo"] == f"https://img.example.com/{new_flame.id}/0.jpg"
    assert body[1]["age"] == 40
    assert "email" not in body[0]


def test_match_without_photos_has_null_photo(client, make_user, make_match, auth_headers):
    me = make_user()
    other = make_user()
    make_match(me, other)

    [summary] = client.get("/api/matches", headers=auth_headers(me)).get_json()
    assert summary["photo"] is None


def test_other_peoples_matches_are_not_listed(client, make_user, make_match, auth_headers):
    me = make_user()
    alice = make_user()
    bob = make_user()
    make_match(alice, bob)

    assert client.get("/api/matches", headers=auth_headers(me)).get_json() == []


def test_unmatch_removes_match_and_its_messages(client, session, make_user, make_match, auth_headers):
    me = make_user()
    other = make_user()
    match_id = make_match(me, other).id
    session.add(Message(match_id=match_id, sender_id=other.id, content="hey"))
    session.commit()

    resp = client.delete(f"/api/matches/{match_id}", headers=auth_headers(other))
    assert resp.status_code == 200

    assert session.query(Match).filter_by(id=match_id).count() == 0
    assert session.query(Message).filter_by(match_id=match_id).count() == 0
    assert client.get("/api/matches", headers=auth_headers(me)).get_json() == []


def test_unmatch_by_outsider_is_404(client, session, make_user, make_match, auth_headers):
    alice = make_user()
    bob = make_user()
    mallory = make_user()
    match = make_match(alice, bob)

    resp = client.delete(f"/api/matches/{match.id}", headers=auth_headers(mallory))
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Match not found"
    assert session.query(Match).count() == 1


def test_unmatch_unknown_is_404(client, make_user, auth_headers):
    me = make_user()
    assert client.delete("/api/matches/nope", headers=auth_headers(me)).status_code == 404

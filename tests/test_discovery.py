import pytest

from laid import discovery as discovery_module
from laid.discovery import DiscoveryService, canonical_pair
from laid.models import Match, Swipe


def feed_ids(client, headers):
    resp = client.get("/api/discovery/feed", headers=headers)
    assert resp.status_code == 200
    return [profile["id"] for profile in resp.get_json()]


def swipe(client, headers, target, direction="right"):
    return client.post("/api/discovery/swipe", headers=headers, json={"swipedId": target.id, "direction": direction})


def test_feed_excludes_self_incomplete_suspended_and_swiped(client, make_user, auth_headers):
    me = make_user(complete=True)
    visible = make_user(complete=True)
    make_user(complete=False)
    make_user(complete=True, is_suspended=True)
    liked = make_user(complete=True)
    passed = make_user(complete=True)
    headers = auth_headers(me)

    assert set(feed_ids(client, headers)) == {visible.id, liked.id, passed.id}

    swipe(client, headers, liked, "right")
    swipe(client, headers, passed, "left")

    assert feed_ids(client, headers) == [visible.id]


def test_feed_shows_public_fields_and_photos(client, make_user, auth_headers):
    me = make_user(complete=True)
    other = make_user(complete=True, display_name="Bob", age=31, interests=["chess"])

    [profile] = client.get("/api/discovery/feed", headers=auth_headers(me)).get_json()
    assert profile["id"] == other.id
    assert profile["displayName"] == "Bob"
    assert profile["age"] == 31
    assert profile["interests"] == ["chess"]
    assert len(profile["photos"]) == 2
    assert "email" not in profile


def test_feed_is_capped_at_twenty(client, make_user, auth_headers):
    me = make_user(password=None)
    for _ in range(25):
        make_user(password=None, complete=True)

    assert len(feed_ids(client, auth_headers(me))) == 20


def test_swiping_does_not_hide_me_from_the_other_side(client, make_user, auth_headers):
    alice = make_user(complete=True)
    bob = make_user(complete=True)

    swipe(client, auth_headers(alice), bob, "left")

    assert alice.id in feed_ids(client, auth_headers(bob))


@pytest.mark.parametrize("first_is_lower_id", [True, False])
def test_mutual_right_swipes_form_exactly_one_match(client, session, make_user, auth_headers, first_is_lower_id):
    alice = make_user(complete=True)
    bob = make_user(complete=True)
    first, second = sorted([alice, bob], key=lambda u: u.id, reverse=not first_is_lower_id)

    resp = swipe(client, auth_headers(first), second)
    assert resp.status_code == 200
    assert resp.get_json() == {"match": False}

    resp = swipe(client, auth_headers(second), first)
    body = resp.get_json()
    assert body["match"] is True
    assert body["matchedUserId"] == first.id

    matches = session.query(Match).all()
    assert len(matches) == 1
    assert (matches[0].user1_id, matches[0].user2_id) == canonical_pair(alice.id, bob.id)
    assert matches[0].user1_id < matches[0].user2_id
    assert body["matchId"] == matches[0].id


def test_repeated_right_swipe_reuses_existing_match(client, session, make_user, auth_headers):
    alice = make_user(complete=True)
    bob = make_user(complete=True)

    swipe(client, auth_headers(alice), bob)
    first = swipe(client, auth_headers(bob), alice).get_json()
    again = swipe(client, auth_headers(alice), bob).get_json()

    assert again["match"] is True
    assert again["matchId"] == first["matchId"]
    assert session.query(Match).count() == 1
    assert session.query(Swipe).count() == 3


def test_left_swipe_never_matches(client, session, make_user, auth_headers):
    alice = make_user(complete=True)
    bob = make_user(complete=True)

    swipe(client, auth_headers(alice), bob, "left")
    resp = swipe(client, auth_headers(bob), alice, "right")

    assert resp.get_json() == {"match": False}
    assert session.query(Match).count() == 0


def test_right_after_left_can_still_match(client, session, make_user, auth_headers):
    alice = make_user(complete=True)
    bob = make_user(complete=True)

    swipe(client, auth_headers(alice), bob, "left")
    swipe(client, auth_headers(bob), alice, "right")
    resp = swipe(client, auth_headers(alice), bob, "right")

    assert resp.get_json()["match"] is True
    assert session.query(Match).count() == 1


def test_swipe_on_self_is_rejected(client, session, make_user, auth_headers):
    alice = make_user(complete=True)

    resp = swipe(client, auth_headers(alice), alice)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Cannot swipe on yourself"
    assert session.query(Swipe).count() == 0


def test_swipe_on_unknown_user_is_404(client, make_user, auth_headers):
    alice = make_user()
    resp = client.post("/api/discovery/swipe", headers=auth_headers(alice), json={"swipedId": "ghost", "direction": "right"})
    assert resp.status_code == 404


@pytest.mark.parametrize("payload", [
    {"swipedId": "someone", "direction": "up"},
    {"swipedId": "someone"},
    {"direction": "left"},
])
def test_swipe_payload_validation(client, make_user, auth_headers, payload):
    alice = make_user()
    assert client.post("/api/discovery/swipe", headers=auth_headers(alice), json=payload).status_code == 400


def test_creating_the_same_match_twice_reuses_the_row(session, make_user):
    alice = make_user()
    bob = make_user()
    discovery = DiscoveryService(session)

    first = discovery._create_match(alice.id, bob.id)
    second = discovery._create_match(bob.id, alice.id)

    assert first.id == second.id
    assert session.query(Match).count() == 1


def test_match_insert_falls_back_to_savepoint_without_on_conflict(session, make_user, monkeypatch):
    monkeypatch.setattr(discovery_module, "_dialect_insert", lambda dialect_name: None)
    alice = make_user()
    bob = make_user()
    discovery = DiscoveryService(session)

    first = discovery._create_match(alice.id, bob.id)
    # The second insert hits the unique pair constraint and is absorbed
    second = discovery._create_match(bob.id, alice.id)

    assert first is not None
    assert second.id == first.id
    assert session.query(Match).count() == 1


def test_canonical_pair_is_order_independent():
    assert canonical_pair("b", "a") == canonical_pair("a", "b") == ("a", "b")

"""Tests for topic-related endpoints."""

from fastapi import status

from agora_stage.core.settings import settings
from agora_stage.models import Post, Topic, TopicEvent


def test_create_topic_echoes_flags(client, db_session, category, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={
            "cid": category.cid,
            "title": "Anonymous question",
            "content": "Can I ask this privately?",
            "kind": "question",
            "anonymous": True,
        },
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["anonymous"] is True
    assert data["modOnly"] is False
    assert data["kind"] == "question"
    assert data["post"]["selfPost"] is True
    assert db_session.get(Post, data["pid"]).author_uid == regular_user.uid


def test_create_topic_defaults(client, category, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={"cid": category.cid, "title": "Plain", "content": "Body"},
        headers=auth_headers(regular_user),
    )

    data = response.json()
    assert data["anonymous"] is False
    assert data["kind"] == "note"


def test_create_topic_accepts_string_flags(client, category, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={"cid": category.cid, "title": "Strings", "content": "Body", "anonymous": "false"},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["anonymous"] is False


def test_create_topic_rejects_garbage_flag(client, category, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={"cid": category.cid, "title": "Bad", "content": "Body", "anonymous": "maybe"},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == 422


def test_admin_creates_mod_only_topic(client, category, admin_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={"cid": category.cid, "title": "Staff", "content": "Body", "modOnly": True},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["modOnly"] is True


def test_member_creates_mod_only_topic(client, category, regular_user, auth_headers) -> None:
    """The author may flag their post private, then loses sight of it."""
    response = client.post(
        "/api/v1/topics/",
        json={"cid": category.cid, "title": "Private", "content": "Body", "modOnly": 1},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["modOnly"] is True
    assert data["post"]["content"] == settings.mod_only_placeholder

    read = client.get(f"/api/v1/posts/{data['pid']}", headers=auth_headers(regular_user))
    assert read.status_code == status.HTTP_404_NOT_FOUND


def test_member_replies_mod_only(client, make_topic, regular_user, other_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user)

    response = client.post(
        f"/api/v1/topics/{topic.tid}",
        json={"content": "Only staff should see this", "modOnly": True},
        headers=auth_headers(other_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["modOnly"] is True
    page = client.get(f"/api/v1/topics/{topic.tid}", headers=auth_headers(other_user)).json()
    assert [post["pid"] for post in page["posts"]] == [topic.main_pid]


def test_guest_cannot_create_topic(client, category) -> None:
    response = client.post(
        "/api/v1/topics/", json={"cid": category.cid, "title": "t", "content": "c"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "[[error:not-logged-in]]"}


def test_create_topic_unknown_category(client, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/",
        json={"cid": 9999, "title": "t", "content": "c"},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "[[error:no-category]]"}


def test_reply_echoes_flags(client, db_session, make_topic, regular_user, other_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user)

    response = client.post(
        f"/api/v1/topics/{topic.tid}",
        json={"content": "Anonymous answer", "anonymous": True},
        headers=auth_headers(other_user),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["anonymous"] is True
    assert data["modOnly"] is False
    assert data["selfPost"] is True
    assert db_session.get(Post, data["pid"]).author_uid == other_user.uid


def test_reply_to_missing_topic(client, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/99999", json={"content": "x"}, headers=auth_headers(regular_user)
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "[[error:no-topic]]", "tid": 99999}


def test_topic_page_filters_mod_only_posts(
    client, make_topic, make_reply, admin_user, regular_user, auth_headers
) -> None:
    topic, main = make_topic(admin_user)
    private = make_reply(topic, admin_user, content="Private reply", mod_only=True)
    normal = make_reply(topic, regular_user, content="Normal reply")

    as_member = client.get(f"/api/v1/topics/{topic.tid}", headers=auth_headers(regular_user)).json()
    as_admin = client.get(f"/api/v1/topics/{topic.tid}", headers=auth_headers(admin_user)).json()
    as_guest = client.get(f"/api/v1/topics/{topic.tid}").json()

    assert [post["pid"] for post in as_member["posts"]] == [main.pid, normal.pid]
    assert [post["pid"] for post in as_guest["posts"]] == [main.pid, normal.pid]
    assert [post["pid"] for post in as_admin["posts"]] == [main.pid, private.pid, normal.pid]


def test_topic_page_flags(client, make_topic, regular_user, admin_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user, anonymous=True)

    as_admin = client.get(f"/api/v1/topics/{topic.tid}", headers=auth_headers(admin_user)).json()
    as_author = client.get(f"/api/v1/topics/{topic.tid}", headers=auth_headers(regular_user)).json()

    assert as_admin["posts"][0]["anonymous"] is True
    assert as_admin["posts"][0]["selfPost"] is False
    assert as_admin["privileges"]["isAdminOrMod"] is True
    assert as_author["posts"][0]["selfPost"] is True
    assert as_author["privileges"]["isOwner"] is True
    assert as_author["privileges"]["canSolve"] is True


def test_missing_topic_page(client) -> None:
    response = client.get("/api/v1/topics/99999")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "[[error:no-topic]]"


def test_owner_solves_and_unsolves(client, db_session, make_topic, regular_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user)
    headers = auth_headers(regular_user)

    solved = client.put(f"/api/v1/topics/{topic.tid}/solved", headers=headers)
    assert solved.status_code == status.HTTP_200_OK
    assert solved.json()["isSolved"] is True
    assert solved.json()["events"][0]["type"] == "solve"

    again = client.put(f"/api/v1/topics/{topic.tid}/solved", headers=headers)
    assert again.json()["events"] == []

    unsolved = client.delete(f"/api/v1/topics/{topic.tid}/solved", headers=headers)
    assert unsolved.json()["solved"] == 0
    assert unsolved.json()["events"][0]["type"] == "unsolve"

    history = client.get(f"/api/v1/topics/{topic.tid}/events").json()
    assert [event["type"] for event in history] == ["solve", "unsolve"]


def test_stranger_cannot_solve(client, db_session, make_topic, regular_user, other_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user)

    response = client.put(f"/api/v1/topics/{topic.tid}/solved", headers=auth_headers(other_user))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"message": "[[error:no-privileges]]", "tid": topic.tid}
    assert db_session.get(Topic, topic.tid).solved == 0


def test_admin_can_solve(client, make_topic, regular_user, admin_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user)

    response = client.put(f"/api/v1/topics/{topic.tid}/solved", headers=auth_headers(admin_user))

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["solved"] == 1


def test_solve_rejects_notes(client, make_topic, regular_user, auth_headers) -> None:
    topic, _ = make_topic(regular_user, kind="note")

    response = client.put(f"/api/v1/topics/{topic.tid}/solved", headers=auth_headers(regular_user))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "[[error:topic-not-question]]"


def test_guest_cannot_solve(client, make_topic, regular_user) -> None:
    topic, _ = make_topic(regular_user)

    response = client.post("/api/v1/topics/solve", json={"tids": [topic.tid]})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "[[error:not-logged-in]]"}


def test_batch_solve(client, make_topic, regular_user, auth_headers) -> None:
    first, _ = make_topic(regular_user)
    second, _ = make_topic(regular_user)

    response = client.post(
        "/api/v1/topics/solve",
        json={"tids": [first.tid, str(second.tid)]},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_200_OK
    assert [item["tid"] for item in response.json()] == [first.tid, second.tid]
    assert all(item["isSolved"] for item in response.json())

    response = client.post(
        "/api/v1/topics/unsolve", json={"tids": [first.tid]}, headers=auth_headers(regular_user)
    )
    assert response.json()[0]["solved"] == 0


def test_batch_solve_invalid_tids(client, regular_user, auth_headers) -> None:
    bodies = ({"tids": "invalid"}, {"tids": ["abc"]}, {"tids": [True]}, {"tids": ["²"]}, [1, 2], None)
    for body in bodies:
        response = client.post("/api/v1/topics/solve", json=body, headers=auth_headers(regular_user))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"message": "[[error:invalid-tid]]"}


def test_batch_solve_missing_topic(client, regular_user, auth_headers) -> None:
    response = client.post(
        "/api/v1/topics/solve", json={"tids": [99999]}, headers=auth_headers(regular_user)
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "[[error:no-topic]]", "tid": 99999}


def test_batch_solve_is_all_or_nothing(
    client, db_session, make_topic, regular_user, other_user, auth_headers
) -> None:
    mine, _ = make_topic(regular_user)
    theirs, _ = make_topic(other_user)

    response = client.post(
        "/api/v1/topics/solve",
        json={"tids": [mine.tid, theirs.tid]},
        headers=auth_headers(regular_user),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["tid"] == theirs.tid
    assert db_session.get(Topic, mine.tid).solved == 0
    assert db_session.query(TopicEvent).count() == 0


def test_listing_excludes_solved(client, make_topic, regular_user, admin_user, auth_headers) -> None:
    open_topic, _ = make_topic(regular_user)
    done_topic, _ = make_topic(regular_user)
    client.put(f"/api/v1/topics/{done_topic.tid}/solved", headers=auth_headers(regular_user))

    for headers in ({}, auth_headers(regular_user), auth_headers(admin_user)):
        response = client.get("/api/v1/topics/", params={"sort": "recent"}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        tids = [topic["tid"] for topic in response.json()["topics"]]
        assert open_topic.tid in tids
        assert done_topic.tid not in tids


def test_listing_by_category(client, make_topic, regular_user, other_category) -> None:
    make_topic(regular_user)
    elsewhere, _ = make_topic(regular_user, cid=other_category.cid)

    response = client.get("/api/v1/topics/", params={"cid": [other_category.cid]})

    assert [topic["tid"] for topic in response.json()["topics"]] == [elsewhere.tid]
    assert response.json()["nextStart"] > 0


def test_listing_rejects_empty_range(client) -> None:
    response = client.get("/api/v1/topics/", params={"start": 5, "stop": 2})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "[[error:invalid-data]]"}

from skillverse.models import Chat

from .conftest import API


def start_chat(client, headers, user_id):
    return client.post(f"{API}/chats/", json={"user_id": user_id}, headers=headers)


def test_chat_is_created_once_per_pair(client, make_user, auth_headers, db):
    alice, bob = make_user(name="Alice"), make_user(name="Bob")

    first = start_chat(client, auth_headers(alice), bob.id)
    reverse = start_chat(client, auth_headers(bob), alice.id)

    assert first.status_code == 200
    assert first.json()["id"] == reverse.json()["id"]
    assert sorted(first.json()["participant_ids"]) == sorted([alice.id, bob.id])
    db.expire_all()
    assert db.query(Chat).count() == 1


def test_cannot_chat_with_yourself(client, make_user, auth_headers):
    alice = make_user()

    response = start_chat(client, auth_headers(alice), alice.id)

    assert response.status_code == 422


def test_chat_with_unknown_user(client, make_user, auth_headers):
    response = start_chat(client, auth_headers(make_user()), 4040)

    assert response.status_code == 404


def test_messages_and_read_receipts(client, make_user, auth_headers):
    alice, bob = make_user(name="Alice"), make_user(name="Bob")
    chat_id = start_chat(client, auth_headers(alice), bob.id).json()["id"]
    url = f"{API}/chats/{chat_id}/messages"

    sent = client.post(url, json={"content": " hi bob "}, headers=auth_headers(alice))
    client.post(url, json={"content": "are you there?"}, headers=auth_headers(alice))
    client.post(url, json={"content": "yes"}, headers=auth_headers(bob))

    assert sent.status_code == 201
    assert sent.json()["content"] == "hi bob"
    assert sent.json()["read"] is False

    # Marking read only touches the other participant's messages
    marked = client.post(f"{API}/chats/{chat_id}/read", headers=auth_headers(bob)).json()
    assert marked["updated"] == 2

    messages = client.get(url, headers=auth_headers(alice)).json()
    assert [m["content"] for m in messages] == ["hi bob", "are you there?", "yes"]
    assert [m["read"] for m in messages] == [True, True, False]

    chats = client.get(f"{API}/chats/", headers=auth_headers(alice)).json()
    assert chats[0]["last_message"]["content"] == "yes"


def test_outsider_cannot_read_chat(client, make_user, auth_headers):
    alice, bob, eve = make_user(), make_user(), make_user()
    chat_id = start_chat(client, auth_headers(alice), bob.id).json()["id"]

    read = client.get(f"{API}/chats/{chat_id}/messages", headers=auth_headers(eve))
    send = client.post(
        f"{API}/chats/{chat_id}/messages", json={"content": "hello"}, headers=auth_headers(eve)
    )

    assert read.status_code == 403
    assert send.status_code == 403


def test_empty_message_rejected(client, make_user, auth_headers):
    alice, bob = make_user(), make_user()
    chat_id = start_chat(client, auth_headers(alice), bob.id).json()["id"]

    response = client.post(
        f"{API}/chats/{chat_id}/messages", json={"content": "   "}, headers=auth_headers(alice)
    )

    assert response.status_code == 422


def test_user_search_excludes_caller(client, make_user, auth_headers):
    me = make_user(name="Priya", skills=["python"])
    match = make_user(name="Ravi", skills=["Python", "SQL"])
    make_user(name="Kiran", skills=["painting"])

    found = client.get(f"{API}/chats/users", params={"q": "python"}, headers=auth_headers(me)).json()

    assert [user["id"] for user in found] == [match.id]

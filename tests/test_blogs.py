import pytest

from skillverse.models import Blog, BlogVote
from skillverse.services.blogs import BlogService

from .conftest import API


@pytest.fixture
def blog(client, make_user, auth_headers):
    author = make_user(name="Writer")
    response = client.post(
        f"{API}/blogs/",
        json={"title": "Study tips", "tag": "  Learning ", "content": "Spaced repetition works."},
        headers=auth_headers(author),
    )
    assert response.status_code == 201
    return author, response.json()


def test_create_blog(blog):
    author, body = blog

    assert body["author"] == "Writer"
    assert body["author_id"] == author.id
    assert body["tag"] == "learning"
    assert body["upvotes"] == 0
    assert body["downvotes"] == 0


def test_blank_blog_rejected(client, make_user, auth_headers):
    response = client.post(
        f"{API}/blogs/",
        json={"title": "   ", "tag": "x", "content": "body"},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 422


def test_list_blogs_newest_first(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    for title in ("first", "second"):
        client.post(
            f"{API}/blogs/", json={"title": title, "tag": "misc", "content": "c"}, headers=headers
        )

    titles = [item["title"] for item in client.get(f"{API}/blogs/").json()]

    assert titles == ["second", "first"]


def test_vote_sequence(client, make_user, auth_headers, blog):
    _, body = blog
    headers = auth_headers(make_user())
    url = f"{API}/blogs/{body['id']}/vote"

    up = client.patch(url, params={"type": "up"}, headers=headers).json()
    assert (up["upvotes"], up["downvotes"], up["vote"]) == (1, 0, "up")

    repeat = client.patch(url, params={"type": "upvote"}, headers=headers).json()
    assert repeat["message"] == "Already upvoted."
    assert (repeat["upvotes"], repeat["downvotes"]) == (1, 0)

    flipped = client.patch(url, params={"type": "downvote"}, headers=headers).json()
    assert flipped["message"] == "Vote updated successfully."
    assert (flipped["upvotes"], flipped["downvotes"], flipped["vote"]) == (0, 1, "down")

    again = client.patch(url, params={"type": "down"}, headers=headers).json()
    assert again["message"] == "Already downvoted."
    assert (again["upvotes"], again["downvotes"]) == (0, 1)


def test_votes_from_many_users(client, make_user, auth_headers, blog, db):
    _, body = blog
    url = f"{API}/blogs/{body['id']}/vote"
    voters = [make_user() for _ in range(3)]

    client.patch(url, params={"type": "up"}, headers=auth_headers(voters[0]))
    client.patch(url, params={"type": "up"}, headers=auth_headers(voters[1]))
    client.patch(url, params={"type": "down"}, headers=auth_headers(voters[2]))

    fetched = client.get(f"{API}/blogs/{body['id']}").json()
    assert (fetched["upvotes"], fetched["downvotes"]) == (2, 1)
    assert fetched["vote_map"] == {
        str(voters[0].id): "up",
        str(voters[1].id): "up",
        str(voters[2].id): "down",
    }
    db.expire_all()
    assert db.query(BlogVote).count() == 3


def test_invalid_vote_type(client, make_user, auth_headers, blog):
    _, body = blog

    response = client.patch(
        f"{API}/blogs/{body['id']}/vote", params={"type": "sideways"}, headers=auth_headers(make_user())
    )

    assert response.status_code == 422
    assert response.json()["message"] == "Invalid vote type."


def test_vote_on_missing_blog(client, make_user, auth_headers):
    response = client.patch(
        f"{API}/blogs/777/vote", params={"type": "up"}, headers=auth_headers(make_user())
    )

    assert response.status_code == 404


def test_delete_blog_permissions(client, make_user, auth_headers, blog, db):
    author, body = blog
    url = f"{API}/blogs/{body['id']}"

    stranger = client.delete(url, headers=auth_headers(make_user()))
    assert stranger.status_code == 403
    assert stranger.json()["message"] == "Unauthorized to delete this blog."

    own = client.delete(url, headers=auth_headers(author))
    assert own.status_code == 200
    assert own.json()["message"] == "Blog deleted successfully."
    db.expire_all()
    assert db.query(Blog).count() == 0


def test_admin_deletes_any_blog(client, make_user, auth_headers, blog):
    _, body = blog
    admin = make_user(email="admin@skillverse.io")

    response = client.delete(f"{API}/blogs/{body['id']}", headers=auth_headers(admin))

    assert response.status_code == 200


def test_concurrent_first_vote_counts_once(
    client, make_user, auth_headers, blog, db, lookup_misses_once
):
    _, body = blog
    voter = make_user()
    headers = auth_headers(voter)
    url = f"{API}/blogs/{body['id']}/vote"
    client.patch(url, params={"type": "up"}, headers=headers)

    calls = lookup_misses_once(BlogService, "get_vote")
    repeat = client.patch(url, params={"type": "up"}, headers=headers).json()

    assert len(calls) == 2
    assert repeat["message"] == "Already upvoted."
    assert (repeat["upvotes"], repeat["downvotes"]) == (1, 0)
    assert db.query(BlogVote).filter(BlogVote.user_id == voter.id).count() == 1


def test_concurrent_first_vote_becomes_flip(
    client, make_user, auth_headers, blog, lookup_misses_once
):
    _, body = blog
    headers = auth_headers(make_user())
    url = f"{API}/blogs/{body['id']}/vote"
    client.patch(url, params={"type": "up"}, headers=headers)

    lookup_misses_once(BlogService, "get_vote")
    flipped = client.patch(url, params={"type": "down"}, headers=headers).json()

    assert flipped["message"] == "Vote updated successfully."
    assert (flipped["upvotes"], flipped["downvotes"], flipped["vote"]) == (0, 1, "down")

from skillverse.models import Blog, Course, Enrollment

from .conftest import API


def test_update_profile(client, make_user, auth_headers):
    user = make_user()

    response = client.put(
        f"{API}/users/profile",
        json={"bio": "Backend dev", "skills": [" fastapi ", "", "sql"]},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["bio"] == "Backend dev"
    assert response.json()["skills"] == ["fastapi", "sql"]


def test_upload_avatar(client, make_user, auth_headers, storage):
    user = make_user()

    response = client.put(
        f"{API}/users/profile/avatar",
        files={"avatar": ("me.png", b"\x89PNG", "image/png")},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json()["avatar_url"].startswith("https://res.cloudinary.com/demo/avatars/")
    assert storage.uploads[0][0] == "avatars"


def test_avatar_must_be_image(client, make_user, auth_headers):
    response = client.put(
        f"{API}/users/profile/avatar",
        files={"avatar": ("notes.txt", b"text", "text/plain")},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 422


def test_payout_details(client, make_user, auth_headers):
    user = make_user()
    url = f"{API}/users/payout-details"

    partial = client.put(url, json={"bank_name": "SBI"}, headers=auth_headers(user))
    assert partial.status_code == 422

    complete = client.put(
        url,
        json={"bank_name": "SBI", "account_number": "123456789", "ifsc_code": "SBIN0000001"},
        headers=auth_headers(user),
    )
    assert complete.status_code == 200
    assert complete.json()["payout_details"]["ifsc_code"] == "SBIN0000001"


def test_public_profile(client, db, make_user, make_course):
    creator = make_user(name="Instructor")
    learner = make_user(name="Learner")
    course = make_course(creator)
    db.add(Enrollment(user_id=learner.id, course_id=course.id))
    db.commit()

    profile = client.get(f"{API}/users/{learner.id}/profile").json()
    assert profile["user"]["name"] == "Learner"
    assert "email" not in profile["user"]
    assert [c["id"] for c in profile["enrolled_courses"]] == [course.id]

    instructor = client.get(f"{API}/users/{creator.id}/profile").json()
    assert [c["id"] for c in instructor["created_courses"]] == [course.id]

    assert client.get(f"{API}/users/999/profile").status_code == 404


def test_dashboard(client, db, make_user, make_course, auth_headers):
    creator = make_user(name="Creator")
    course = make_course(creator, is_paid=True, price=100.0, earnings=200.0)
    other = make_course(make_user(), title="Other course")
    db.add(Enrollment(user_id=creator.id, course_id=other.id))
    db.add(Blog(title="Hello", tag="intro", content="c", author=creator.name, author_id=creator.id))
    db.commit()

    response = client.get(f"{API}/users/dashboard", headers=auth_headers(creator))

    assert response.status_code == 200
    body = response.json()
    assert body["profile"]["name"] == "Creator"
    assert [c["id"] for c in body["created_courses"]] == [course.id]
    assert body["total_earnings"] == 200.0
    assert [c["title"] for c in body["created_blogs"]] == ["Hello"]
    assert body["enrolled_courses"] == [{"id": other.id, "title": "Other course"}]
    assert body["progress"][0]["percent"] == 0
    assert body["inbox"] == []


def test_user_search_requires_auth(client):
    assert client.get(f"{API}/users/").status_code == 401


def test_admin_clear_data(client, db, make_user, make_course, auth_headers):
    admin = make_user(email="admin@skillverse.io")
    author = make_user()
    make_course(author)
    db.add(Blog(title="t", tag="x", content="c", author=author.name, author_id=author.id))
    db.commit()

    forbidden = client.delete(f"{API}/admin/clear-data", headers=auth_headers(author))
    assert forbidden.status_code == 403

    response = client.delete(f"{API}/admin/clear-data", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json() == {
        "message": "Database cleared successfully.",
        "deleted_courses": 1,
        "deleted_blogs": 1,
    }
    db.expire_all()
    assert db.query(Course).count() == 0
    assert db.query(Blog).count() == 0


def test_user_search(client, make_user, auth_headers):
    searcher = make_user(name="Searcher")
    make_user(name="Ada Lovelace", skills=["python", "math"])
    make_user(name="Grace Hopper", skills=["cobol"])
    headers = auth_headers(searcher)

    by_skill = client.get(f"{API}/users/", params={"q": "PYTHON"}, headers=headers).json()
    assert [u["name"] for u in by_skill] == ["Ada Lovelace"]

    assert client.get(f"{API}/users/", params={"q": "%"}, headers=headers).json() == []
    assert client.get(f"{API}/users/", params={"q": "_"}, headers=headers).json() == []

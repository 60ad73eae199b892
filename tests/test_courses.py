import json

from skillverse.models import (
    Chapter,
    ChapterCompletion,
    Course,
    CourseRating,
    Enrollment,
    User,
    UserRole,
)

from .conftest import API

QUIZ = {
    "title": "Basics check",
    "questions": [
        {"question": "2 + 2?", "options": ["3", "4", "5", "6"], "correct_index": 1},
        {"question": "Capital of France?", "options": ["Paris", "Rome", "Oslo", "Lima"], "correct_index": 0},
    ],
}


def add_quiz_chapter(client, headers, course_id, title="Quiz", quiz=QUIZ):
    return client.post(
        f"{API}/courses/{course_id}/chapters",
        data={"title": title, "type": "quiz", "quiz": json.dumps(quiz)},
        headers=headers,
    )


def add_video_chapter(client, headers, course_id, title="Lecture"):
    return client.post(
        f"{API}/courses/{course_id}/chapters",
        data={"title": title, "type": "video", "description": "watch me"},
        files={"video": ("lecture.mp4", b"\x00\x01video", "video/mp4")},
        headers=headers,
    )


def test_create_course_promotes_creator(client, make_user, auth_headers, db):
    creator = make_user()

    response = client.post(
        f"{API}/courses/",
        json={"title": "FastAPI 101", "description": "Build APIs", "category": "web"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["is_paid"] is False
    assert body["price"] == 0.0
    assert body["is_creator"] is True
    assert body["creator_name"] == creator.name
    db.expire_all()
    assert db.get(User, creator.id).role == UserRole.INSTRUCTOR


def test_create_paid_course_requires_price(client, make_user, auth_headers):
    creator = make_user()

    response = client.post(
        f"{API}/courses/",
        json={"title": "Pricey", "description": "desc", "is_paid": True, "price": 0},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422


def test_list_courses_search_and_flags(client, make_user, make_course, auth_headers, db):
    creator = make_user()
    learner = make_user()
    python = make_course(creator, title="Python for data", category="data")
    make_course(creator, title="Watercolor", description="Painting", category="art")
    db.add(Enrollment(user_id=learner.id, course_id=python.id))
    db.commit()

    anonymous = client.get(f"{API}/courses/", params={"q": "DATA"}).json()["courses"]
    assert [c["id"] for c in anonymous] == [python.id]
    assert anonymous[0]["is_enrolled"] is False

    signed_in = client.get(f"{API}/courses/", headers=auth_headers(learner)).json()["courses"]
    flags = {c["id"]: c["is_enrolled"] for c in signed_in}
    assert flags[python.id] is True
    assert len(signed_in) == 2


def test_course_search_treats_wildcards_literally(client, make_user, make_course):
    creator = make_user()
    discount = make_course(creator, title="100% Python")
    make_course(creator, title="Watercolor", description="Painting", category="art")

    percent = client.get(f"{API}/courses/", params={"q": "%"}).json()["courses"]
    assert [c["id"] for c in percent] == [discount.id]
    assert client.get(f"{API}/courses/", params={"q": "_"}).json()["courses"] == []


def test_update_paid_course_needs_payout_details(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)

    missing = client.put(
        f"{API}/courses/{course.id}", json={"price": 499}, headers=auth_headers(creator)
    )
    assert missing.status_code == 422

    updated = client.put(
        f"{API}/courses/{course.id}",
        json={"price": 499, "payout_details": {"upi_id": "creator@upi"}},
        headers=auth_headers(creator),
    )
    assert updated.status_code == 200
    assert updated.json()["is_paid"] is True
    assert updated.json()["price"] == 499


def test_update_course_falls_back_to_profile_payout(client, make_user, make_course, auth_headers):
    creator = make_user(payout_upi_id="saved@upi")
    course = make_course(creator)

    response = client.put(
        f"{API}/courses/{course.id}",
        json={"is_paid": True, "price": 199},
        headers=auth_headers(creator),
    )

    assert response.status_code == 200
    assert response.json()["is_paid"] is True


def test_only_creator_updates_course(client, make_user, make_course, auth_headers):
    creator = make_user()
    other = make_user()
    course = make_course(creator)

    response = client.put(
        f"{API}/courses/{course.id}", json={"title": "Hijacked"}, headers=auth_headers(other)
    )

    assert response.status_code == 403


def test_get_missing_course(client):
    response = client.get(f"{API}/courses/9999")

    assert response.status_code == 404
    assert response.json()["message"] == "Course not found"


def test_add_chapters_and_course_detail(client, make_user, make_course, auth_headers, storage):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)

    video = add_video_chapter(client, headers, course.id)
    quiz = add_quiz_chapter(client, headers, course.id)

    assert video.status_code == 201
    assert video.json()["content"]["kind"] == "video"
    assert video.json()["content"]["url"].startswith("https://res.cloudinary.com/")
    assert storage.uploads == [("SkillVerse/videos", "video", "lecture.mp4")]
    assert quiz.status_code == 201
    assert quiz.json()["content"]["kind"] == "quiz"
    assert quiz.json()["position"] == 1

    detail = client.get(f"{API}/courses/{course.id}").json()
    assert detail["chapter_count"] == 2
    assert [c["kind"] for c in detail["chapters"]] == ["video", "quiz"]
    assert "content" not in detail["chapters"][0]


def test_video_chapter_requires_file(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)

    response = client.post(
        f"{API}/courses/{course.id}/chapters",
        data={"title": "No file", "type": "video"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422


def test_invalid_quiz_is_rejected(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)
    bad_quiz = {
        "title": "Broken",
        "questions": [{"question": "?", "options": ["a", "b"], "correct_index": 0}],
    }

    malformed = client.post(
        f"{API}/courses/{course.id}/chapters",
        data={"title": "Quiz", "type": "quiz", "quiz": "{not json"},
        headers=auth_headers(creator),
    )
    three_options = add_quiz_chapter(client, auth_headers(creator), course.id, quiz=bad_quiz)

    assert malformed.status_code == 422
    assert three_options.status_code == 422
    assert three_options.json()["message"] == "Invalid quiz format"


def test_unknown_chapter_type(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)

    response = client.post(
        f"{API}/courses/{course.id}/chapters",
        data={"title": "Audio", "type": "podcast"},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422


def test_reorder_chapters(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)
    ids = [add_quiz_chapter(client, headers, course.id, title=f"Q{i}").json()["id"] for i in range(3)]

    reordered = client.put(
        f"{API}/courses/{course.id}/reorder-chapters",
        json={"chapter_ids": [ids[2], 9999, ids[0], ids[2], ids[1]]},
        headers=headers,
    )
    assert reordered.status_code == 200
    assert reordered.json()["chapter_ids"] == [ids[2], ids[0], ids[1]]

    detail = client.get(f"{API}/courses/{course.id}").json()
    assert [c["id"] for c in detail["chapters"]] == [ids[2], ids[0], ids[1]]
    assert [c["position"] for c in detail["chapters"]] == [0, 1, 2]


def test_reorder_must_include_every_chapter(client, make_user, make_course, auth_headers):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)
    ids = [add_quiz_chapter(client, headers, course.id, title=f"Q{i}").json()["id"] for i in range(2)]

    response = client.put(
        f"{API}/courses/{course.id}/reorder-chapters",
        json={"chapter_ids": [ids[1]]},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["error"]["details"]["missing_chapter_ids"] == [ids[0]]


def test_delete_chapter_renumbers_and_removes_media(
    client, make_user, make_course, auth_headers, storage
):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)
    video_id = add_video_chapter(client, headers, course.id).json()["id"]
    quiz_id = add_quiz_chapter(client, headers, course.id).json()["id"]

    response = client.delete(f"{API}/courses/{course.id}/chapters/{video_id}", headers=headers)

    assert response.status_code == 200
    assert len(storage.deleted) == 1
    assert storage.deleted[0][1] == "video"
    chapters = client.get(f"{API}/courses/{course.id}").json()["chapters"]
    assert [(c["id"], c["position"]) for c in chapters] == [(quiz_id, 0)]


def test_update_chapter_switches_to_quiz(client, make_user, make_course, auth_headers, storage):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)
    chapter_id = add_video_chapter(client, headers, course.id).json()["id"]

    without_quiz = client.put(
        f"{API}/courses/{course.id}/chapters/{chapter_id}",
        data={"type": "quiz"},
        headers=headers,
    )
    assert without_quiz.status_code == 422

    response = client.post(
        f"{API}/courses/{course.id}/chapters/{chapter_id}/quiz", json=QUIZ, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["content"]["kind"] == "quiz"
    assert response.json()["content"]["title"] == "Basics check"
    video_folder = storage.uploads[0][0]
    assert storage.deleted == [(f"{video_folder}/lecture.mp4-1", "video")]


def test_rejected_chapter_discards_upload(client, make_user, make_course, auth_headers, storage):
    creator = make_user()
    course = make_course(creator)

    response = client.post(
        f"{API}/courses/{course.id}/chapters",
        data={"title": "   ", "type": "video"},
        files={"video": ("intro.mp4", b"\x00\x01video", "video/mp4")},
        headers=auth_headers(creator),
    )

    assert response.status_code == 422
    video_folder = storage.uploads[0][0]
    assert storage.deleted == [(f"{video_folder}/intro.mp4-1", "video")]


def test_replacing_chapter_video_removes_old_asset(
    client, make_user, make_course, auth_headers, storage
):
    creator = make_user()
    course = make_course(creator)
    headers = auth_headers(creator)
    chapter_id = add_video_chapter(client, headers, course.id).json()["id"]
    url = f"{API}/courses/{course.id}/chapters/{chapter_id}"

    renamed = client.put(url, data={"title": "Renamed"}, headers=headers)
    assert renamed.status_code == 200
    assert storage.deleted == []

    replaced = client.put(
        url,
        files={"video": ("take2.mp4", b"\x00\x02video", "video/mp4")},
        headers=headers,
    )

    assert replaced.status_code == 200
    video_folder = storage.uploads[0][0]
    assert storage.deleted == [(f"{video_folder}/lecture.mp4-1", "video")]


def test_submit_quiz(client, make_user, make_course, auth_headers, db):
    creator = make_user()
    learner = make_user()
    outsider = make_user()
    course = make_course(creator)
    chapter_id = add_quiz_chapter(client, auth_headers(creator), course.id).json()["id"]
    db.add(Enrollment(user_id=learner.id, course_id=course.id))
    db.commit()
    url = f"{API}/courses/{course.id}/chapters/{chapter_id}/quiz/submit"

    graded = client.post(url, json={"answers": [1, 3]}, headers=auth_headers(learner))
    assert graded.status_code == 200
    assert graded.json() == {"chapter_id": chapter_id, "correct": 1, "total": 2, "score": 50.0}

    wrong_count = client.post(url, json={"answers": [1]}, headers=auth_headers(learner))
    assert wrong_count.status_code == 422

    forbidden = client.post(url, json={"answers": [1, 0]}, headers=auth_headers(outsider))
    assert forbidden.status_code == 403


def test_delete_course_cascades(client, make_user, make_course, auth_headers, db):
    creator = make_user()
    learner = make_user()
    course = make_course(creator)
    course_id = course.id
    headers = auth_headers(creator)
    learner_headers = auth_headers(learner)
    chapter_id = add_quiz_chapter(client, headers, course_id).json()["id"]
    client.post(f"{API}/courses/enroll", json={"course_id": course_id}, headers=learner_headers)
    client.post(
        f"{API}/courses/{course_id}/chapters/{chapter_id}/complete", headers=learner_headers
    )
    client.post(f"{API}/courses/{course_id}/rate", json={"rating": 4}, headers=learner_headers)
    assert db.query(ChapterCompletion).count() == 1
    assert db.query(CourseRating).count() == 1

    forbidden = client.delete(f"{API}/courses/{course_id}", headers=learner_headers)
    assert forbidden.status_code == 403

    response = client.delete(f"{API}/courses/{course_id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Course deleted successfully"

    db.expire_all()
    assert db.get(Course, course_id) is None
    assert db.query(Chapter).count() == 0
    assert db.query(Enrollment).count() == 0
    assert db.query(ChapterCompletion).count() == 0
    assert db.query(CourseRating).count() == 0
    assert db.get(User, learner.id).enrolled_courses == []
    assert db.get(User, creator.id).created_courses == []
    learner_profile = client.get(f"{API}/users/{learner.id}/profile").json()
    assert learner_profile["enrolled_courses"] == []
    creator_profile = client.get(f"{API}/users/{creator.id}/profile").json()
    assert creator_profile["created_courses"] == []


def test_admin_can_delete_any_course(client, make_user, make_course, auth_headers):
    creator = make_user()
    admin = make_user(email="admin@skillverse.io")
    course = make_course(creator)

    response = client.delete(f"{API}/courses/{course.id}", headers=auth_headers(admin))

    assert response.status_code == 200

from fastapi.testclient import TestClient

from .conftest import headers_for, make_user


def _credits(client, user):
    return client.get(f"/api/v1/users/{user.user_id}").json()["total_credits"]


def test_post_and_comment_earn_credit(client: TestClient, student):
    post = client.post("/api/v1/posts", json={"content": "Hello everyone"}, headers=headers_for(student))
    assert post.status_code == 201
    assert post.json()["credit"] == "APPLIED"
    post_id = post.json()["post"]["post_id"]

    comment = client.post(
        f"/api/v1/posts/{post_id}/comments",
        json={"content": "Welcome!"},
        headers=headers_for(student),
    )
    assert comment.status_code == 201
    assert comment.json()["comment"]["author"]["display_name"] == "Sam Student"
    assert _credits(client, student) == 3

    listing = client.get("/api/v1/posts").json()
    assert len(listing) == 1
    assert [c["content"] for c in listing[0]["comments"]] == ["Welcome!"]


def test_every_post_earns_credit(client: TestClient, student):
    for _ in range(2):
        client.post("/api/v1/posts", json={"content": "Same text"}, headers=headers_for(student))
    assert _credits(client, student) == 4


def test_course_post_requires_membership(client: TestClient, session, student, course):
    outsider = make_user(session, "Outside Olaf")
    response = client.post(
        "/api/v1/posts",
        json={"content": "Let me in", "course_id": str(course.course_id)},
        headers=headers_for(outsider),
    )
    assert response.status_code == 403
    assert _credits(client, outsider) == 0

    member = client.post(
        "/api/v1/posts",
        json={"content": "Robots!", "course_id": str(course.course_id)},
        headers=headers_for(student),
    )
    assert member.status_code == 201


def test_comment_on_missing_post(client: TestClient, student):
    response = client.post(
        "/api/v1/posts/00000000-0000-4000-8000-00000000abcd/comments",
        json={"content": "Hello?"},
        headers=headers_for(student),
    )
    assert response.status_code == 404


def test_shared_material_credit(client: TestClient, organizer, student, course):
    student_share = client.post(
        f"/api/v1/courses/{course.course_id}/materials",
        json={"section": "Student notes", "title": "Week 1", "url": "https://files.example.edu/w1.pdf"},
        headers=headers_for(student),
    )
    assert student_share.status_code == 201
    assert student_share.json()["material"]["is_student_contribution"] is True
    assert student_share.json()["credit"] == "APPLIED"

    organizer_share = client.post(
        f"/api/v1/courses/{course.course_id}/materials",
        json={"section": "Slides", "title": "Lecture 1", "url": "https://files.example.edu/l1.pdf"},
        headers=headers_for(organizer),
    )
    assert organizer_share.json()["credit"] is None

    assert _credits(client, student) == 10
    assert _credits(client, organizer) == 0

import pytest
from fastapi.testclient import TestClient

from conftest import auth_headers
from main import app
from models.user import RoleEnum


def test_health_and_request_id():
    client = TestClient(app)

    resp = client.get("/api/health", headers={"X-Request-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_register_login_profile(client):
    first = await client.post("/api/auth/register", json={
        "full_name": "Site Owner", "username": "owner", "email": "owner@coursebay.dev", "password": "secret123",
    })
    second = await client.post("/api/auth/register", json={
        "full_name": "Sam Student", "username": "sam", "email": "sam@coursebay.dev", "password": "secret123",
    })
    assert first.status_code == 201
    assert first.json()["user"]["role"] == "admin"
    assert second.json()["user"]["role"] == "student"

    duplicate = await client.post("/api/auth/register", json={
        "full_name": "Sam Again", "username": "sam2", "email": "sam@coursebay.dev", "password": "secret123",
    })
    assert duplicate.status_code == 400
    assert duplicate.json()["success"] is False

    login = await client.post("/api/auth/login", data={"username": "sam@coursebay.dev", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    profile = await client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["data"]["username"] == "sam"

    bad = await client.post("/api/auth/login", data={"username": "sam", "password": "wrong-password"})
    assert bad.status_code == 401


@pytest.mark.asyncio
async def test_missing_token_is_401_envelope(client):
    resp = await client.get("/api/enrollments/my-enrollments")

    assert resp.status_code == 401
    assert resp.json()["success"] is False
    assert resp.json()["code"] == "not_authorized"


@pytest.mark.asyncio
async def test_checkout_flow(client, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)
    headers = auth_headers(student)

    order = await client.post(
        "/api/payments/create-order", json={"course_id": course.id, "amount": 499}, headers=headers
    )
    assert order.status_code == 200
    body = order.json()
    assert body["amount"] == 49900
    assert body["currency"] == "INR"
    assert body["key_id"]

    verify = await client.post("/api/payments/verify", headers=headers, json={
        "razorpay_order_id": body["order_id"],
        "razorpay_payment_id": "pay_test_1",
        "razorpay_signature": "mock_signature",
        "course_id": course.id,
        "amount": 499,
    })
    assert verify.status_code == 200
    enrollment = verify.json()["enrollment"]
    assert enrollment["payment_status"] == "completed"
    assert enrollment["course"]["title"] == course.title

    detail = await client.get(f"/api/courses/{course.id}")
    assert detail.json()["data"]["enrolled_students"] == 1

    check = await client.get(f"/api/enrollments/check/{course.id}", headers=headers)
    assert check.json()["enrolled"] is True

    history = await client.get("/api/payments/history", headers=headers)
    assert [e["order_id"] for e in history.json()["data"]] == [body["order_id"]]

    again = await client.post(
        "/api/payments/create-order", json={"course_id": course.id}, headers=headers
    )
    assert again.status_code == 400
    assert again.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_invalid_signature_is_rejected(client, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)
    headers = auth_headers(student)
    order = (await client.post(
        "/api/payments/create-order", json={"course_id": course.id}, headers=headers
    )).json()

    verify = await client.post("/api/payments/verify", headers=headers, json={
        "razorpay_order_id": order["order_id"],
        "razorpay_payment_id": "pay_test_1",
        "razorpay_signature": "invalid_signature",
        "course_id": course.id,
        "amount": 499,
    })

    assert verify.status_code == 400
    assert verify.json()["code"] == "payment_verification_failed"
    check = await client.get(f"/api/enrollments/check/{course.id}", headers=headers)
    assert check.json()["enrolled"] is False


@pytest.mark.asyncio
async def test_student_cannot_create_course(client, make_user):
    student = await make_user("student")
    resp = await client.post("/api/courses", headers=auth_headers(student), json={
        "title": "Sneaky", "description": "Nope", "price": 1, "category": "other", "duration": 1,
    })
    assert resp.status_code == 401
    assert resp.json()["code"] == "not_authorized"


@pytest.mark.asyncio
async def test_validation_errors_are_400(client, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor)

    resp = await client.post(
        f"/api/courses/{course.id}/reviews", json={"rating": 6}, headers=auth_headers(student)
    )

    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_unknown_course_is_404(client):
    resp = await client.get("/api/courses/not-an-id")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Course not found", "code": "not_found"}


@pytest.mark.asyncio
async def test_quiz_to_certificate(client, make_user, make_course, make_quiz):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    quiz = await make_quiz(instructor, course)
    headers = auth_headers(student)

    enrolled = await client.post("/api/enrollments", json={"course_id": course.id}, headers=headers)
    assert enrolled.status_code == 201

    listing = await client.get(f"/api/quizzes/course/{course.id}", headers=headers)
    assert "questions" not in listing.json()["data"][0]

    taking = await client.get(f"/api/quizzes/{quiz.id}", headers=headers)
    questions = taking.json()["data"]["questions"]
    assert len(questions) == 4
    assert "correct_answer" not in questions[0]

    submitted = await client.post(f"/api/quizzes/{quiz.id}/submit", headers=headers, json={
        "answers": [{"selected_answer": a} for a in (1, 1, 0, 1)],
    })
    assert submitted.json()["score"] == 75
    assert submitted.json()["passed"] is True

    generated = await client.post(
        "/api/certificates/generate", json={"course_id": course.id, "quiz_id": quiz.id}, headers=headers
    )
    assert generated.status_code == 201
    url = generated.json()["certificate_url"]

    again = await client.post(
        "/api/certificates/generate", json={"course_id": course.id, "quiz_id": quiz.id}, headers=headers
    )
    assert again.status_code == 200
    assert again.json()["certificate"]["certificate_number"] == generated.json()["certificate"]["certificate_number"]

    download = await client.get(url, headers=headers)
    assert download.status_code == 200
    assert download.headers["content-type"] == "application/pdf"
    assert download.content.startswith(b"%PDF")


@pytest.mark.asyncio
@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
async def test_non_finite_progress_is_400(client, db, make_user, make_course, literal):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    headers = auth_headers(student)
    await client.post("/api/enrollments", json={"course_id": course.id}, headers=headers)
    enrollment = await db.enrollments.find_one({"student_id": student.id})

    resp = await client.put(
        f"/api/enrollments/{enrollment['_id']}/progress",
        content=f'{{"progress": {literal}}}',
        headers={**headers, "Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["code"] == "validation_error"
    stored = await db.enrollments.find_one({"student_id": student.id})
    assert stored["progress"] == 0

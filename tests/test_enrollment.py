import pytest
from pymongo.errors import PyMongoError

from crud.user import UserCRUD
from exceptions import (
    AuthorizationError, ConflictError, InternalError, PaymentVerificationError, ValidationError,
)
from models.user import RoleEnum
from schemas.enrollment import PaymentConfirmation
from services.catalog import CatalogService
from services.enrollment import EnrollmentService, clamp_progress


@pytest.mark.parametrize("raw,expected", [
    (-5, 0), (0, 0), (45, 45), (44.6, 45), (99.4, 99), (100, 100), (250, 100),
])
def test_clamp_progress(raw, expected):
    assert clamp_progress(raw) == expected


@pytest.mark.asyncio
async def test_student_needs_payment_for_paid_course(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)

    with pytest.raises(PaymentVerificationError):
        await EnrollmentService(db, gateway).enroll(student, course.id)
    assert await db.enrollments.count_documents({}) == 0


@pytest.mark.asyncio
async def test_instructor_enrolls_without_payment(db, gateway, make_user, make_course):
    owner = await make_user("owner", RoleEnum.instructor)
    colleague = await make_user("colleague", RoleEnum.instructor)
    course = await make_course(owner, price=499)

    enrollment = await EnrollmentService(db, gateway).enroll(colleague, course.id)

    assert enrollment.payment_status == "completed"
    assert enrollment.course.title == course.title


@pytest.mark.asyncio
async def test_free_course_enrolls_directly(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)

    with pytest.raises(ValidationError):
        await service.create_order(student, course.id)

    enrollment = await service.enroll(student, course.id)
    assert enrollment.amount == 0


@pytest.mark.asyncio
async def test_paid_checkout_updates_counter_and_profile(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)
    service = EnrollmentService(db, gateway)

    order = await service.create_order(student, course.id, 499)
    assert order.amount == 49900

    enrollment = await service.enroll(
        student, course.id, 499,
        PaymentConfirmation(order_id=order.id, payment_id="pay_123", signature="sig"),
    )

    assert enrollment.order_id == order.id
    assert enrollment.payment_id == "pay_123"
    assert (await CatalogService(db).get_course(course.id)).enrolled_students == 1
    profile = await UserCRUD(db).get_user_by_id(student.id)
    assert [e.course_id for e in profile.enrolled_courses] == [course.id]
    assert (await gateway.get_order(order.id)).status == "paid"


@pytest.mark.asyncio
async def test_create_order_rejects_wrong_amount(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)

    with pytest.raises(ValidationError):
        await EnrollmentService(db, gateway).create_order(student, course.id, 1)


@pytest.mark.asyncio
async def test_failed_verification_creates_nothing(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=499)
    service = EnrollmentService(db, gateway)
    order = await service.create_order(student, course.id)

    with pytest.raises(PaymentVerificationError):
        await service.enroll(
            student, course.id, 499,
            PaymentConfirmation(order_id=order.id, payment_id="pay_1", signature="invalid_signature"),
        )

    assert await db.enrollments.count_documents({}) == 0
    assert (await CatalogService(db).get_course(course.id)).enrolled_students == 0


@pytest.mark.asyncio
async def test_duplicate_enrollment_leaves_counter_unchanged(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student", RoleEnum.admin)
    course = await make_course(instructor)
    service = EnrollmentService(db, gateway)

    await service.enroll(student, course.id)
    with pytest.raises(ConflictError):
        await service.enroll(student, course.id)

    assert await db.enrollments.count_documents({}) == 1
    assert (await CatalogService(db).get_course(course.id)).enrolled_students == 1


@pytest.mark.asyncio
async def test_unique_index_rejects_racing_insert(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)
    await service.enroll(student, course.id)

    with pytest.raises(ConflictError):
        await service.enrollment_crud.create_enrollment({"student_id": student.id, "course_id": course.id})


@pytest.mark.asyncio
async def test_progress_drives_completion(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)
    enrollment = await service.enroll(student, course.id)

    partial = await service.update_progress(student, enrollment.id, 45)
    assert partial.progress == 45
    assert partial.completed is False
    assert partial.completed_at is None

    done = await service.update_progress(student, enrollment.id, 130)
    assert done.progress == 100
    assert done.completed is True
    assert done.completed_at is not None

    reopened = await service.update_progress(student, enrollment.id, 80)
    assert reopened.completed is False
    assert reopened.completed_at is None

    profile = await UserCRUD(db).get_user_by_id(student.id)
    assert profile.enrolled_courses[0].progress == 80


@pytest.mark.asyncio
async def test_progress_is_owner_only(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    intruder = await make_user("intruder")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)
    enrollment = await service.enroll(student, course.id)

    with pytest.raises(AuthorizationError):
        await service.update_progress(intruder, enrollment.id, 50)


@pytest.mark.asyncio
async def test_check_enrollment(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)

    assert await service.check_enrollment(student, course.id) == (False, None)
    await service.enroll(student, course.id)
    enrolled, enrollment = await service.check_enrollment(student, course.id)
    assert enrolled is True
    assert enrollment.course_id == course.id


@pytest.mark.asyncio
async def test_order_of_another_student_is_rejected(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    alice = await make_user("alice")
    mallory = await make_user("mallory")
    course = await make_course(instructor, price=499)
    service = EnrollmentService(db, gateway)
    order = await service.create_order(alice, course.id)

    with pytest.raises(PaymentVerificationError, match="another account"):
        await service.enroll(
            mallory, course.id, 499,
            PaymentConfirmation(order_id=order.id, payment_id="pay_1", signature="sig"),
        )

    assert await db.enrollments.count_documents({}) == 0
    assert (await gateway.get_order(order.id)).status == "created"

    enrollment = await service.enroll(
        alice, course.id, 499,
        PaymentConfirmation(order_id=order.id, payment_id="pay_1", signature="sig"),
    )
    assert enrollment.student_id == alice.id


@pytest.mark.asyncio
async def test_profile_write_failure_rolls_back(db, gateway, make_user, make_course, monkeypatch):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    service = EnrollmentService(db, gateway)

    async def failing_write(user_id, entry):
        raise PyMongoError("write failed")

    monkeypatch.setattr(service.user_crud, "add_enrolled_course", failing_write)

    with pytest.raises(InternalError):
        await service.enroll(student, course.id)

    assert await db.enrollments.count_documents({}) == 0
    assert (await CatalogService(db).get_course(course.id)).enrolled_students == 0


@pytest.mark.asyncio
async def test_missing_student_profile_rolls_back(db, gateway, make_user, make_course):
    instructor = await make_user("instructor", RoleEnum.instructor)
    student = await make_user("student")
    course = await make_course(instructor, price=0)
    await db.users.delete_one({"username": "student"})

    with pytest.raises(InternalError):
        await EnrollmentService(db, gateway).enroll(student, course.id)

    assert await db.enrollments.count_documents({}) == 0
    assert (await CatalogService(db).get_course(course.id)).enrolled_students == 0

import pytest
from sqlalchemy.exc import OperationalError

from creditboard.models import (
    AttendanceStatus,
    CreditEventType,
    CreditTransaction,
    PendingCredit,
    PendingCreditStatus,
)
from creditboard.services import (
    attendance_service,
    course_service,
    crediting_service,
    feed_service,
    homework_service,
    ledger_service,
    material_service,
    reconciliation_service,
)
from creditboard.services.crediting_service import CreditOutcome
from creditboard.services.ledger_service import LedgerRuleViolation

from .conftest import actor_for, make_user


def _mark(session, organizer, lecture, student, status):
    attendance_service.save_attendance(
        session,
        actor=actor_for(organizer),
        lecture_id=lecture.lecture_id,
        statuses={student.user_id: status},
    )
    session.commit()
    effect = crediting_service.attendance_effect(
        lecture,
        student_id=student.user_id,
        status=status,
        organizer_id=organizer.user_id,
    )
    return crediting_service.run_credit_side_effect(session, effect)


def _attendance_rows(session, student):
    return (
        session.query(CreditTransaction)
        .filter_by(user_id=student.user_id, event_type=CreditEventType.ATTENDANCE)
        .all()
    )


def _total(session, user):
    session.refresh(user)
    assert user.total_credits == ledger_service.ledger_total(session, user.user_id)
    return user.total_credits


def test_attendance_present_is_idempotent(session, organizer, student, lecture):
    assert _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT) == CreditOutcome.APPLIED
    assert _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT) == CreditOutcome.UNCHANGED
    assert _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT) == CreditOutcome.UNCHANGED

    rows = _attendance_rows(session, student)
    assert len(rows) == 1
    assert rows[0].amount == 5
    assert rows[0].reason == 'Attendance for lecture: "Sensors and Actuators"'
    assert rows[0].issuer_id == organizer.user_id
    assert _total(session, student) == 5


def test_attendance_flip_revokes_and_regrants(session, organizer, student, lecture):
    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)
    assert _mark(session, organizer, lecture, student, AttendanceStatus.ABSENT) == CreditOutcome.APPLIED
    assert _attendance_rows(session, student) == []
    assert _total(session, student) == 0

    assert _mark(session, organizer, lecture, student, AttendanceStatus.ABSENT) == CreditOutcome.UNCHANGED
    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)
    assert len(_attendance_rows(session, student)) == 1
    assert _total(session, student) == 5


def test_attendance_credit_is_per_lecture(session, organizer, student, course, lecture):
    second = course_service.create_lecture(
        session, actor=actor_for(organizer), course_id=course.course_id, title="Motors"
    )
    session.commit()

    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)
    _mark(session, organizer, second, student, AttendanceStatus.PRESENT)

    assert len(_attendance_rows(session, student)) == 2
    assert _total(session, student) == 10


def _submitted(session, student, course, organizer):
    assignment = course_service.create_assignment(
        session, actor=actor_for(organizer), course_id=course.course_id, title="Line follower"
    )
    submission = homework_service.submit(
        session, actor=actor_for(student), assignment_id=assignment.assignment_id, content="My robot code"
    )
    session.commit()
    return assignment, submission


def _grade(session, organizer, assignment, submission, value):
    homework_service.grade(
        session, actor=actor_for(organizer), submission_id=submission.submission_id, grade_value=value
    )
    session.commit()
    effect = crediting_service.homework_effect(submission, assignment, grader_id=organizer.user_id)
    return crediting_service.run_credit_side_effect(session, effect)


def _graded(session, organizer, student, course, grades):
    assignment, submission = _submitted(session, student, course, organizer)
    return [_grade(session, organizer, assignment, submission, value) for value in grades]


def test_grade_credit_equals_grade(session, organizer, student, course):
    _graded(session, organizer, student, course, [12])
    assert _total(session, student) == 12

    rows = session.query(CreditTransaction).filter_by(event_type=CreditEventType.HOMEWORK_GRADE).all()
    assert rows[0].reason == 'Homework grade for "Line follower"'


def test_regrade_replaces_previous_credit(session, organizer, student, course):
    outcomes = _graded(session, organizer, student, course, [12, 17, 17])

    assert outcomes == [CreditOutcome.APPLIED, CreditOutcome.APPLIED, CreditOutcome.UNCHANGED]
    rows = session.query(CreditTransaction).filter_by(event_type=CreditEventType.HOMEWORK_GRADE).all()
    assert [row.amount for row in rows] == [17]
    assert _total(session, student) == 17


def test_regrade_to_zero_removes_credit(session, organizer, student, course):
    _graded(session, organizer, student, course, [8, 0])

    assert session.query(CreditTransaction).filter_by(event_type=CreditEventType.HOMEWORK_GRADE).count() == 0
    assert _total(session, student) == 0


def test_engagement_scenario_then_attendance_correction(session, organizer, student, lecture):
    actor = actor_for(student)
    post = feed_service.create_post(session, actor=actor, content="Hello everyone")
    session.commit()
    assert crediting_service.run_credit_side_effect(session, crediting_service.post_effect(post)) == CreditOutcome.APPLIED

    comment = feed_service.create_comment(session, actor=actor, post_id=post.post_id, content="Welcome!")
    session.commit()
    crediting_service.run_credit_side_effect(session, crediting_service.comment_effect(comment))

    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)
    assert _total(session, student) == 8

    _mark(session, organizer, lecture, student, AttendanceStatus.ABSENT)
    assert _total(session, student) == 3


def test_post_reason_names_context(session, student, course):
    actor = actor_for(student)
    feed_post = feed_service.create_post(session, actor=actor, content="General")
    course_post = feed_service.create_post(session, actor=actor, content="Course", course_id=course.course_id)
    session.commit()

    assert crediting_service.post_effect(feed_post).reason == "Post in the community feed"
    assert crediting_service.post_effect(course_post).reason == "Post in Intro to Robotics"


def test_award_bonus(session, organizer, student):
    transaction = crediting_service.award_bonus(
        session, actor=actor_for(organizer), user_id=student.user_id, amount=15, reason="helpful peer"
    )
    session.commit()

    rows = session.query(CreditTransaction).filter_by(user_id=student.user_id).all()
    assert len(rows) == 1
    assert (rows[0].amount, rows[0].reason) == (15, "helpful peer")
    assert transaction.event_type == CreditEventType.BONUS
    assert _total(session, student) == 15


@pytest.mark.parametrize("amount,reason", [(0, "nice"), (-5, "nice"), (5, "  ")])
def test_award_bonus_rejects_invalid_input(session, organizer, student, amount, reason):
    with pytest.raises(LedgerRuleViolation):
        crediting_service.award_bonus(
            session, actor=actor_for(organizer), user_id=student.user_id, amount=amount, reason=reason
        )
    assert session.query(CreditTransaction).count() == 0


def test_award_bonus_requires_organizer(session, student):
    peer = make_user(session, "Pat Peer")
    with pytest.raises(LedgerRuleViolation) as excinfo:
        crediting_service.award_bonus(
            session, actor=actor_for(student), user_id=peer.user_id, amount=5, reason="thanks"
        )
    assert excinfo.value.status_code == 403


def test_concurrent_duplicate_is_reported_unchanged(session, organizer, student, lecture, monkeypatch):
    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)

    # Simulate a racing writer whose existence check ran before our insert.
    monkeypatch.setattr(ledger_service, "find_by_key", lambda *args, **kwargs: None)
    outcome = _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)

    assert outcome == CreditOutcome.UNCHANGED
    monkeypatch.undo()
    assert len(_attendance_rows(session, student)) == 1
    assert _total(session, student) == 5


def test_failed_credit_is_parked_and_reconciled(session, organizer, student, lecture, monkeypatch):
    calls = []
    real_record = ledger_service.record

    def flaky_record(*args, **kwargs):
        calls.append(kwargs)
        raise OperationalError("INSERT INTO credit_transactions", {}, Exception("database is locked"))

    monkeypatch.setattr(ledger_service, "record", flaky_record)
    outcome = _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)

    assert outcome == CreditOutcome.DEFERRED
    assert len(calls) == 3
    # The attendance itself stays saved.
    records = attendance_service.list_attendance(session, lecture_id=lecture.lecture_id)
    assert [record.status for record in records] == [AttendanceStatus.PRESENT]
    assert _total(session, student) == 0

    pending = session.query(PendingCredit).one()
    assert pending.status == PendingCreditStatus.PENDING
    assert pending.idempotency_key == f"attendance:{lecture.lecture_id}"

    monkeypatch.setattr(ledger_service, "record", real_record)
    summary = reconciliation_service.run_reconciliation(session)

    assert summary["resolved"] == 1
    assert _total(session, student) == 5
    session.refresh(pending)
    assert pending.status == PendingCreditStatus.RESOLVED

    # A second pass has nothing left to do.
    assert reconciliation_service.retry_pending_credits(session)["resolved"] == 0
    assert len(_attendance_rows(session, student)) == 1


def test_pending_credit_fails_after_max_attempts(session, organizer, student, lecture, monkeypatch):
    def broken_record(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("connection refused"))

    monkeypatch.setattr(ledger_service, "record", broken_record)
    _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT)

    first = reconciliation_service.retry_pending_credits(session, max_attempts=3)
    second = reconciliation_service.retry_pending_credits(session, max_attempts=3)

    assert first == {"resolved": 0, "failed": 0, "still_pending": 1}
    assert second == {"resolved": 0, "failed": 1, "still_pending": 0}
    pending = session.query(PendingCredit).one()
    assert pending.status == PendingCreditStatus.FAILED
    assert pending.attempts == 3
    assert "connection refused" in pending.last_error


def test_material_credit_only_for_student_contributions(session, organizer, student, course):
    shared = material_service.share_material(
        session,
        actor=actor_for(student),
        course_id=course.course_id,
        section="Student notes",
        title="Week 1 summary",
        url="https://files.example.edu/w1.pdf",
    )
    official = material_service.share_material(
        session,
        actor=actor_for(organizer),
        course_id=course.course_id,
        section="Slides",
        title="Lecture 1",
        url="https://files.example.edu/l1.pdf",
    )
    session.commit()

    assert crediting_service.material_effect(official) is None
    effect = crediting_service.material_effect(shared)
    assert effect.reason == "Shared material in Student notes: Week 1 summary"
    assert crediting_service.run_credit_side_effect(session, effect) == CreditOutcome.APPLIED
    assert _total(session, student) == 10


def _fail_ledger_writes(monkeypatch):
    def locked_record(*args, **kwargs):
        raise OperationalError("INSERT INTO credit_transactions", {}, Exception("database is locked"))

    monkeypatch.setattr(ledger_service, "record", locked_record)


def test_absence_supersedes_parked_attendance_credit(session, organizer, student, lecture, monkeypatch):
    _fail_ledger_writes(monkeypatch)
    assert _mark(session, organizer, lecture, student, AttendanceStatus.PRESENT) == CreditOutcome.DEFERRED
    monkeypatch.undo()

    assert _mark(session, organizer, lecture, student, AttendanceStatus.ABSENT) == CreditOutcome.UNCHANGED
    pending = session.query(PendingCredit).one()
    assert pending.status == PendingCreditStatus.SUPERSEDED

    summary = reconciliation_service.run_reconciliation(session)

    assert summary["resolved"] == 0
    assert _attendance_rows(session, student) == []
    assert _total(session, student) == 0


def test_regrade_supersedes_parked_grade(session, organizer, student, course, monkeypatch):
    assignment, submission = _submitted(session, student, course, organizer)
    _fail_ledger_writes(monkeypatch)
    assert _grade(session, organizer, assignment, submission, 10) == CreditOutcome.DEFERRED
    monkeypatch.undo()

    assert _grade(session, organizer, assignment, submission, 15) == CreditOutcome.APPLIED
    reconciliation_service.run_reconciliation(session)

    rows = session.query(CreditTransaction).filter_by(event_type=CreditEventType.HOMEWORK_GRADE).all()
    assert [row.amount for row in rows] == [15]
    assert _total(session, student) == 15
    assert session.query(PendingCredit).one().status == PendingCreditStatus.SUPERSEDED


def test_only_latest_parked_grade_is_replayed(session, organizer, student, course, monkeypatch):
    assignment, submission = _submitted(session, student, course, organizer)
    _fail_ledger_writes(monkeypatch)
    _grade(session, organizer, assignment, submission, 10)
    _grade(session, organizer, assignment, submission, 15)
    monkeypatch.undo()

    statuses = {row.amount: row.status for row in session.query(PendingCredit).all()}
    assert statuses == {10: PendingCreditStatus.SUPERSEDED, 15: PendingCreditStatus.PENDING}

    summary = reconciliation_service.retry_pending_credits(session)

    assert summary == {"resolved": 1, "failed": 0, "still_pending": 0}
    assert _total(session, student) == 15


def test_racing_regrade_applies_latest_grade(session, organizer, student, course, monkeypatch):
    assignment, submission = _submitted(session, student, course, organizer)
    _grade(session, organizer, assignment, submission, 10)

    real_find_by_key = ledger_service.find_by_key
    lookups = []

    # The first lookup misses the row another writer just committed.
    def stale_then_fresh(*args, **kwargs):
        lookups.append(kwargs["idempotency_key"])
        if len(lookups) == 1:
            return None
        return real_find_by_key(*args, **kwargs)

    monkeypatch.setattr(ledger_service, "find_by_key", stale_then_fresh)
    assert _grade(session, organizer, assignment, submission, 15) == CreditOutcome.APPLIED
    monkeypatch.undo()

    assert len(lookups) == 2
    rows = session.query(CreditTransaction).filter_by(event_type=CreditEventType.HOMEWORK_GRADE).all()
    assert [row.amount for row in rows] == [15]
    assert _total(session, student) == 15


def test_regrade_that_keeps_colliding_is_parked(session, organizer, student, course, monkeypatch):
    assignment, submission = _submitted(session, student, course, organizer)
    _grade(session, organizer, assignment, submission, 10)

    monkeypatch.setattr(ledger_service, "find_by_key", lambda *args, **kwargs: None)
    assert _grade(session, organizer, assignment, submission, 15) == CreditOutcome.DEFERRED
    monkeypatch.undo()
    assert _total(session, student) == 10

    reconciliation_service.run_reconciliation(session)

    assert _total(session, student) == 15
    assert session.query(PendingCredit).one().status == PendingCreditStatus.RESOLVED

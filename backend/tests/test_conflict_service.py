import pytest

from app.schemas.schedule import ClassSubjectAssignment, ScheduleEntry, TimeSlot
from app.services.conflict_service import ConflictDetector, intervals_overlap


@pytest.fixture
def assignments():
    return {
        "cs-math": ClassSubjectAssignment(id="cs-math", class_id="10A", subject_id="math", teacher_id="t1"),
        "cs-phys": ClassSubjectAssignment(id="cs-phys", class_id="10B", subject_id="phys", teacher_id="t1"),
        "cs-chem": ClassSubjectAssignment(id="cs-chem", class_id="10A", subject_id="chem", teacher_id="t2"),
        "cs-free": ClassSubjectAssignment(id="cs-free", class_id="10C", subject_id="art", teacher_id=None),
    }


@pytest.fixture
def detector(assignments):
    return ConflictDetector(assignments)


def entry(entry_id, class_subject_id, start, end, room=None, day=0, assignments=None):
    return ScheduleEntry(
        id=entry_id,
        class_subject_id=class_subject_id,
        day_of_week=day,
        start_time=start,
        end_time=end,
        room=room,
        class_subject=(assignments or {}).get(class_subject_id),
    )


def slot(class_subject_id, start, end, room=None, day=0):
    return TimeSlot(class_subject_id=class_subject_id, day_of_week=day, start_time=start, end_time=end, room=room)


def test_overlap_predicate_is_half_open():
    assert intervals_overlap(540, 600, 570, 630)
    assert not intervals_overlap(540, 600, 600, 660)
    assert not intervals_overlap(600, 660, 540, 600)
    assert intervals_overlap(540, 660, 570, 600)


def test_overlapping_slot_with_same_teacher_reports_one_teacher_conflict(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    report = detector.detect(slot("cs-phys", "09:30", "10:30", room="B"), existing)

    assert [item.type for item in report.conflicts] == ["teacher_conflict"]
    assert report.conflicts[0].conflicting_schedule_id == "s1"
    assert "Monday" in report.conflicts[0].message
    assert "t1" in report.conflicts[0].message


def test_touching_slots_do_not_conflict(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    report = detector.detect(slot("cs-phys", "10:00", "11:00", room="A"), existing)

    assert report.conflicts == []
    assert not report.has_conflicts


def test_disjoint_slots_sharing_teacher_and_room_do_not_conflict(detector, assignments):
    existing = [
        entry("s1", "cs-math", "08:00", "09:00", room="A", assignments=assignments),
        entry("s2", "cs-math", "13:00", "14:00", room="A", assignments=assignments),
    ]

    report = detector.detect(slot("cs-phys", "10:00", "11:30", room="A"), existing)

    assert report.conflicts == []


def test_same_entry_can_yield_teacher_and_room_conflict(detector, assignments):
    existing = [
        entry("s1", "cs-math", "08:00", "09:00", room="A", assignments=assignments),
        entry("s2", "cs-math", "09:00", "10:00", room="B", assignments=assignments),
    ]
    first_two = detector.detect(slot("cs-math", "09:00", "10:00", room="B"), existing[:1])
    assert first_two.conflicts == []

    report = detector.detect(slot("cs-phys", "08:30", "09:30", room="A"), existing)

    by_schedule = [(item.type, item.conflicting_schedule_id) for item in report.conflicts]
    assert ("teacher_conflict", "s1") in by_schedule
    assert ("room_conflict", "s1") in by_schedule
    assert ("teacher_conflict", "s2") in by_schedule
    assert ("room_conflict", "s2") not in by_schedule


def test_room_conflict_with_different_teacher(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="Lab-1", assignments=assignments)]

    report = detector.detect(slot("cs-chem", "09:15", "09:45", room="Lab-1"), existing)

    assert [item.type for item in report.conflicts] == ["room_conflict"]
    assert "Lab-1" in report.conflicts[0].message


def test_missing_room_never_conflicts_on_room(detector, assignments):
    existing = [entry("s1", "cs-chem", "09:00", "10:00", room=None, assignments=assignments)]

    report = detector.detect(slot("cs-math", "09:00", "10:00", room=None), existing)

    assert report.conflicts == []


def test_blank_room_is_treated_as_missing(detector, assignments):
    existing = [entry("s1", "cs-chem", "09:00", "10:00", room="  ", assignments=assignments)]

    report = detector.detect(slot("cs-math", "09:00", "10:00", room=""), existing)

    assert report.conflicts == []


def test_teacherless_candidate_never_matches_a_teacher(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    report = detector.detect(slot("cs-free", "09:00", "10:00", room="B"), existing)

    assert report.conflicts == []


def test_teacherless_assignments_do_not_conflict_on_teacher(detector, assignments):
    existing = [entry("s1", "cs-free", "09:00", "10:00", assignments=assignments)]

    report = detector.detect(slot("cs-free", "09:00", "10:00"), existing)

    assert report.conflicts == []


def test_exclude_id_skips_previous_version_of_slot(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    report = detector.detect(slot("cs-math", "09:30", "10:30", room="A"), existing, exclude_id="s1")

    assert report.conflicts == []


def test_unknown_candidate_assignment_short_circuits(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    report = detector.detect(slot("missing", "10:00", "09:00", room="A"), existing)

    assert len(report.conflicts) == 1
    assert report.conflicts[0].type == "class_subject_not_found"
    assert report.warnings == []


def test_inverted_range_reports_time_error_alongside_overlaps(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]

    # 09:45 -> 09:15 still satisfies the overlap predicate against [09:00, 10:00).
    report = detector.detect(slot("cs-phys", "09:45", "09:15", room="A"), existing)
    assert [item.type for item in report.conflicts] == ["teacher_conflict", "room_conflict", "time_error"]
    assert report.conflicts[-1].conflicting_schedule_id is None

    report = detector.detect(slot("cs-phys", "11:00", "10:30", room="A"), existing)
    assert [item.type for item in report.conflicts] == ["time_error"]


def test_existing_entry_resolved_through_assignment_map(detector):
    existing = [entry("s1", "cs-math", "09:00", "10:00")]

    report = detector.detect(slot("cs-phys", "09:30", "10:30"), existing)

    assert [item.type for item in report.conflicts] == ["teacher_conflict"]


def test_unresolvable_existing_entry_still_checked_for_room(detector):
    existing = [entry("s1", "ghost", "09:00", "10:00", room="A")]

    report = detector.detect(slot("cs-math", "09:30", "10:30", room="A"), existing)

    assert [item.type for item in report.conflicts] == ["room_conflict"]


def test_class_overlap_is_opt_in(assignments):
    existing = [entry("s1", "cs-chem", "09:00", "10:00", assignments=assignments)]
    candidate = slot("cs-math", "09:30", "10:30")

    assert ConflictDetector(assignments).detect(candidate, existing).conflicts == []

    report = ConflictDetector(assignments, check_class_overlap=True).detect(candidate, existing)
    assert [item.type for item in report.conflicts] == ["class_conflict"]


def test_unusual_duration_is_a_warning_not_a_conflict(assignments):
    detector = ConflictDetector(assignments, min_duration_minutes=30, max_duration_minutes=180)

    short = detector.detect(slot("cs-math", "09:00", "09:15"), [])
    assert short.conflicts == []
    assert len(short.warnings) == 1
    assert "15 minutes" in short.warnings[0]

    normal = detector.detect(slot("cs-math", "09:00", "10:30"), [])
    assert normal.warnings == []


def test_detect_is_repeatable(detector, assignments):
    existing = [entry("s1", "cs-math", "09:00", "10:00", room="A", assignments=assignments)]
    candidate = slot("cs-phys", "09:30", "10:30", room="A")

    assert detector.detect(candidate, existing) == detector.detect(candidate, existing)


def test_time_slot_accepts_seconds_and_rejects_bad_times():
    assert slot("cs-math", "08:00:00", "09:30:00").start_time == "08:00"

    with pytest.raises(ValueError):
        slot("cs-math", "25:00", "26:00")

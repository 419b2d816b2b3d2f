from __future__ import annotations

import pytest

from madrasa_ledger.core.enums import SubjectKind
from madrasa_ledger.core.exceptions import NotFoundError, SourceUnavailable, StoreTimeout
from madrasa_ledger.store.entity_store import EntityStore

from conftest import InMemorySource


def test_load_builds_indexed_snapshot(container):
    store = container.store
    assert store.has_loaded
    assert not store.is_stale
    assert store.student("S-1").full_name == "Abdullah"
    assert store.course("C-2").teacher_id == "T-2"
    with pytest.raises(NotFoundError):
        store.teacher("T-404")


def test_failed_reload_keeps_previous_snapshot(container, db):
    store = container.store
    before = store.snapshot
    db.fetch_error = SourceUnavailable("connection refused")
    db.students.clear()

    with pytest.raises(SourceUnavailable):
        store.load()

    assert store.snapshot is before
    assert store.is_stale
    assert store.student("S-1").full_name == "Abdullah"

    db.fetch_error = None
    store.load()
    assert not store.is_stale
    assert store.snapshot.students == ()


def test_slow_source_times_out_and_marks_stale(db):
    store = EntityStore(InMemorySource(db), timeout_seconds=0.05)
    try:
        store.load()
        db.fetch_delay = 0.5
        with pytest.raises(StoreTimeout):
            store.load()
        assert store.is_stale
        assert store.student("S-2").full_name == "Maryam"
    finally:
        store.close()


def test_first_load_failure_leaves_empty_unloaded_store(db):
    db.fetch_error = SourceUnavailable("down")
    store = EntityStore(InMemorySource(db), timeout_seconds=1.0)
    try:
        with pytest.raises(SourceUnavailable):
            store.load()
        assert not store.has_loaded
        assert store.snapshot.students == ()
    finally:
        store.close()


def test_assigned_teachers_follow_course_reassignment(container):
    store = container.store
    student = store.student("S-1")
    assert store.resolve_assigned_teachers(student) == frozenset({"T-1"})

    container.course_service.upsert({"course_id": "C-1", "name": "Hifz Halqa", "teacher_id": "T-2"})

    assert store.resolve_assigned_teachers(student) == frozenset({"T-2"})
    assert {s.student_id for s in store.students_of_teacher("T-2")} == {"S-1", "S-2", "S-3", "S-4"}


def test_student_without_course_has_no_teachers(container):
    student = container.student_service.upsert({"student_id": "S-9", "full_name": "Bilal"})
    assert container.store.resolve_assigned_teachers(student) == frozenset()


def test_subject_exists_checks_the_right_collection(container):
    store = container.store
    assert store.subject_exists(SubjectKind.STUDENT, "S-1")
    assert store.subject_exists(SubjectKind.STAFF, "T-1")
    assert not store.subject_exists(SubjectKind.STAFF, "S-1")
    assert not store.subject_exists(SubjectKind.STUDENT, None)

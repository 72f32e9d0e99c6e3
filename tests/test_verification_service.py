"""Test scan verification decisions."""
import base64
import json
from datetime import timedelta

import pytest

from attendly.models.attendance import AttendanceStatus
from attendly.models.class_section import Coordinate
from attendly.services.token_service import TokenService
from attendly.services.verification_service import AttendanceResult, VerificationService
from tests.conftest import START, north_of

IN_ROOM = Coordinate(latitude=0.0, longitude=0.0)

def token_at(live_class, clock, seconds):
    class_section, session = live_class
    return TokenService.encode(session, class_section, clock.at(seconds))

def test_classroom_scenario(state, live_class, clock):
    """Scan in the room, too late, too far, then again."""
    token = token_at(live_class, clock, 0)

    clock.at(10)
    outcome = state.verify_scan(token, IN_ROOM)
    assert outcome.result is AttendanceResult.SUCCESS
    assert outcome.record.status is AttendanceStatus.ON_TIME
    assert outcome.record.location_verified

    clock.at(400)
    assert state.verify_scan(token, IN_ROOM).result is AttendanceResult.EXPIRED

    clock.at(10)
    assert state.verify_scan(token, north_of(IN_ROOM, 50)).result is AttendanceResult.OUTSIDE_GEOFENCE

    repeat = state.verify_scan(token, IN_ROOM)
    assert repeat.result is AttendanceResult.ALREADY_CHECKED_IN
    assert repeat.record == outcome.record

    summary = state.summary()
    assert (summary.on_time_count, summary.late_count, summary.absent_count) == (1, 0, 0)
    assert len(state.ledger.all_records()) == 1

def test_invalid_token(state):
    outcome = state.verify_scan('definitely not a token', IN_ROOM)

    assert outcome.result is AttendanceResult.INVALID
    assert outcome.payload is None
    assert state.ledger.all_records() == []

@pytest.mark.parametrize('field, value', [
    ('qrWindow', 1e-320),
    ('latitude', 1000.0),
])
def test_crafted_token_is_invalid(state, live_class, clock, field, value):
    class_section, session = live_class
    wire = TokenService.build_payload(session, class_section, clock.at(0)).to_wire()
    wire[field] = value
    token = base64.b64encode(json.dumps(wire).encode()).decode()

    outcome = state.verify_scan(token, IN_ROOM)

    assert outcome.result is AttendanceResult.INVALID
    assert state.ledger.all_records() == []

@pytest.mark.parametrize('scan_at, expected', [
    (0, AttendanceResult.SUCCESS),
    (89, AttendanceResult.SUCCESS),
    (179, AttendanceResult.SUCCESS),
    (180, AttendanceResult.EXPIRED),
    (3600, AttendanceResult.EXPIRED),
])
def test_one_bucket_of_tolerance(state, live_class, clock, scan_at, expected):
    token = token_at(live_class, clock, 0)
    clock.at(scan_at)

    assert state.verify_scan(token, IN_ROOM).result is expected

def test_token_from_the_future_expires(state, live_class, clock):
    token = token_at(live_class, clock, 180)
    clock.at(0)

    assert state.verify_scan(token, IN_ROOM).result is AttendanceResult.EXPIRED

@pytest.mark.parametrize('location', [None, IN_ROOM, north_of(IN_ROOM, 5000)])
def test_expired_regardless_of_location(state, live_class, clock, location):
    token = token_at(live_class, clock, 0)
    clock.at(400)

    assert state.verify_scan(token, location).result is AttendanceResult.EXPIRED

def test_missing_location_is_outside_geofence(state, live_class, clock):
    token = token_at(live_class, clock, 0)

    assert state.verify_scan(token, None).result is AttendanceResult.OUTSIDE_GEOFENCE

@pytest.mark.parametrize('meters, expected', [
    (29.9, AttendanceResult.SUCCESS),
    (30.1, AttendanceResult.OUTSIDE_GEOFENCE),
    (50, AttendanceResult.OUTSIDE_GEOFENCE),
])
def test_geofence_radius(state, live_class, clock, meters, expected):
    token = token_at(live_class, clock, 0)

    assert state.verify_scan(token, north_of(IN_ROOM, meters)).result is expected

def test_rejected_scan_leaves_device_untouched(student_device, live_class, clock):
    token = token_at(live_class, clock, 0)

    student_device.verify_scan(token, north_of(IN_ROOM, 500))
    student_device.verify_scan(token, None)
    clock.at(900)
    student_device.verify_scan(token, IN_ROOM)

    assert student_device.store.list_classes() == []
    assert student_device.store.list_sessions() == []
    assert student_device.ledger.all_records() == []
    assert student_device.store.enrolled_classes(student_device.student_profile.id) == []

def test_unknown_device_learns_class_from_scan(student_device, live_class, clock):
    class_section, session = live_class
    token = token_at(live_class, clock, 0)

    outcome = student_device.verify_scan(token, IN_ROOM)

    assert outcome.result is AttendanceResult.SUCCESS
    learned = student_device.store.get_class(class_section.id)
    assert learned.name == class_section.name
    assert student_device.store.get_session(session.id).start_time == START
    assert student_device.store.is_enrolled(student_device.student_profile.id, class_section.id)
    assert student_device.class_name_for(outcome.record) == class_section.name

def test_locked_session(state, live_class, clock):
    class_section, _ = live_class
    token = token_at(live_class, clock, 0)
    state.store.end_session(class_section, now=clock.at(30))

    outcome = state.verify_scan(token, IN_ROOM)

    assert outcome.result is AttendanceResult.LOCKED
    assert state.ledger.all_records() == []

def test_locked_beats_already_checked_in(state, live_class, clock):
    class_section, _ = live_class
    token = token_at(live_class, clock, 0)
    state.verify_scan(token, IN_ROOM)
    state.store.end_session(class_section, now=clock.at(30))

    assert state.verify_scan(token, IN_ROOM).result is AttendanceResult.LOCKED

def test_ended_but_unlocked_session_is_expired(state, live_class, clock):
    _, session = live_class
    token = token_at(live_class, clock, 0)
    session.end_time = clock.at(20)

    assert state.verify_scan(token, IN_ROOM).result is AttendanceResult.EXPIRED

@pytest.mark.parametrize('elapsed, status', [
    (0, AttendanceStatus.ON_TIME),
    (300, AttendanceStatus.ON_TIME),
    (301, AttendanceStatus.LATE),
    (1200, AttendanceStatus.LATE),
])
def test_late_threshold_boundary(state, live_class, clock, elapsed, status):
    token = token_at(live_class, clock, elapsed)

    outcome = state.verify_scan(token, IN_ROOM)

    assert outcome.result is AttendanceResult.SUCCESS
    assert outcome.record.status is status
    assert outcome.record.timestamp == clock.now

def test_classify_boundary():
    assert VerificationService.classify(START, 5, START + timedelta(seconds=300)) is AttendanceStatus.ON_TIME
    assert VerificationService.classify(START, 5, START + timedelta(seconds=301)) is AttendanceStatus.LATE
    assert VerificationService.classify(START, 0, START + timedelta(seconds=1)) is AttendanceStatus.LATE

def test_repeat_scans_across_windows_are_idempotent(state, live_class, clock):
    first = state.verify_scan(token_at(live_class, clock, 0), IN_ROOM)
    second = state.verify_scan(token_at(live_class, clock, 400), IN_ROOM)

    assert first.result is AttendanceResult.SUCCESS
    assert second.result is AttendanceResult.ALREADY_CHECKED_IN
    assert state.ledger.count_for(first.record.session_id) == 1
    assert state.summary().total == 1

def test_different_students_each_get_a_record(state, live_class, clock):
    token = token_at(live_class, clock, 0)

    for student_id in ('a', 'b', 'c'):
        assert state.engine.verify_scan(token, IN_ROOM, student_id).success

    assert state.ledger.count_for(live_class[1].id) == 3

def test_preview_does_not_mutate(student_device, live_class, clock):
    class_section, session = live_class
    token = token_at(live_class, clock, 0)

    preview = student_device.engine.preview(token, student_device.student_profile.id)

    assert preview['class']['name'] == class_section.name
    assert preview['session_id'] == session.id
    assert preview['is_enrolled'] is False
    assert student_device.store.list_classes() == []

def test_preview_of_garbage(student_device):
    preview = student_device.engine.preview('???', student_device.student_profile.id)

    assert preview['result'] == 'invalid'

def test_outcome_messages():
    assert AttendanceResult.EXPIRED.message == "QR expired. Ask professor to refresh."
    assert AttendanceResult.SUCCESS.value == "success"
    assert AttendanceResult.OUTSIDE_GEOFENCE.value == "outsideGeofence"

"""Shared fixtures."""
from datetime import datetime, timedelta, timezone

import pytest

from attendly import create_app, db
from attendly.models.class_section import ClassForm, Coordinate
from attendly.models.profile import StudentProfile
from attendly.services.device_state import DeviceState

# Divisible by 90, so t=0 is the first second of a rotation window
START = datetime.fromtimestamp(1_800_000_000, tz=timezone.utc)

# Meters per degree of latitude for the haversine radius in use
METERS_PER_DEGREE = 111194.93

class FixedClock:
    """Clock that only moves when told to."""
    
    def __init__(self, now: datetime = START):
        self.now = now
    
    def __call__(self) -> datetime:
        return self.now
    
    def at(self, seconds: float) -> datetime:
        """Jump to ``seconds`` after START."""
        self.now = START + timedelta(seconds=seconds)
        return self.now

def north_of(origin: Coordinate, meters: float) -> Coordinate:
    return Coordinate(latitude=origin.latitude + meters / METERS_PER_DEGREE, longitude=origin.longitude)

@pytest.fixture
def clock():
    return FixedClock()

@pytest.fixture
def class_form():
    return ClassForm(
        name='Intro to Design Systems',
        section='A',
        semester='Spring 2026',
        room='Fine Arts 201',
        meeting_days=['Mon', 'Wed'],
        coordinate=Coordinate(latitude=0.0, longitude=0.0),
        geofence_radius=30
    )

@pytest.fixture
def state(clock):
    """A device acting as both professor and student."""
    return DeviceState(student_profile=StudentProfile(name='Aiden Cross'), clock=clock)

@pytest.fixture
def student_device(clock):
    """A second device that has never seen any class."""
    return DeviceState(student_profile=StudentProfile(name='Maya Ortiz'), clock=clock)

@pytest.fixture
def live_class(state, class_form, clock):
    """A class with a session that started at t=0."""
    class_section = state.store.create_class(class_form)
    session = state.store.start_session(class_section, 90, 5, now=clock.at(0))
    return class_section, session

@pytest.fixture
def app(state):
    """Create test app."""
    app = create_app('testing', state=state)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()

@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()

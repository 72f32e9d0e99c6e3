"""Sample data for a fresh device."""
import logging

from attendly.models.attendance import AttendanceSummary
from attendly.models.class_section import ClassSection, Coordinate
from attendly.models.profile import ProfessorProfile, StudentProfile
from attendly.services.device_state import DeviceState

logger = logging.getLogger(__name__)

class SeedService:
    """Service to seed device state with sample data."""
    
    @staticmethod
    def example_class() -> ClassSection:
        return ClassSection(
            name="Intro to Design Systems",
            section="A",
            semester="Spring 2026",
            room="Fine Arts 201",
            meeting_days=["Mon", "Wed"],
            geofence_radius=30,
            risk_score=0.12,
            coordinate=Coordinate(latitude=37.8719, longitude=-122.2585)
        )
    
    @staticmethod
    def seed_all(state: DeviceState) -> bool:
        """
        Seed the sample class, both profiles and the student's history.
        
        Only a device with no classes and no attendance is seeded, so the
        profiles that existing records point at are never replaced. Returns
        True if anything was seeded.
        """
        if state.store.list_classes() or state.ledger.all_records():
            logger.info("Device already has data; skipping sample seed")
            return False
        
        class_section = SeedService.example_class()
        state.store.add_class(class_section)
        
        state.professor_profile = ProfessorProfile(name="Dr. Celeste Wong")
        state.student_profile = StudentProfile(name="Aiden Cross")
        state.store.enroll_student(state.student_profile.id, class_section.id)
        state.ledger.set_summary(
            state.student_profile.id,
            AttendanceSummary(on_time_count=42, late_count=3, absent_count=2)
        )
        logger.info("Seeded sample class %s", class_section.name)
        return True

"""Class management API endpoints."""
from flask import Blueprint, request, current_app
from attendly.api import get_state
from attendly.utils.helpers import success_response, error_response
from attendly.utils.validators import Validator

classes_bp = Blueprint('classes', __name__)

def _class_view(state, class_section):
    data = class_section.to_dict()
    live = state.store.active_session_for(class_section.id)
    data['live_session_id'] = live.id if live else None
    data['is_enrolled'] = state.store.is_enrolled(state.student_profile.id, class_section.id)
    return data

@classes_bp.route('', methods=['GET'])
def list_classes():
    """List all classes known to this device."""
    state = get_state()
    return success_response(
        data=[_class_view(state, c) for c in state.store.list_classes()]
    )

@classes_bp.route('', methods=['POST'])
def create_class():
    """Create a class from the professor's form."""
    form = Validator.validate_class_form(
        request.get_json(silent=True),
        default_radius=current_app.config['DEFAULT_GEOFENCE_RADIUS']
    )
    state = get_state()
    class_section = state.store.create_class(form)
    
    return success_response(
        data=_class_view(state, class_section),
        message="Class created successfully",
        status_code=201
    )

@classes_bp.route('/<class_id>', methods=['GET'])
def get_class(class_id):
    """Get one class with its session history."""
    state = get_state()
    class_section = state.store.get_class(class_id)
    if class_section is None:
        return error_response("Class not found", 404)
    
    data = _class_view(state, class_section)
    data['sessions'] = [s.to_dict() for s in state.store.list_sessions(class_id)]
    return success_response(data=data)

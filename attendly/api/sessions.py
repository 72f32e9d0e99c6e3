"""Session lifecycle and QR token API endpoints."""
from flask import Blueprint, request, current_app
from attendly.api import get_state
from attendly.services.token_service import TokenService, time_bucket
from attendly.utils.helpers import success_response, error_response
from attendly.utils.validators import Validator

sessions_bp = Blueprint('sessions', __name__)

def _get_class_or_none(class_id):
    return get_state().store.get_class(class_id)

@sessions_bp.route('/start/<class_id>', methods=['POST'])
def start_session(class_id):
    """Start a live session for a class."""
    class_section = _get_class_or_none(class_id)
    if class_section is None:
        return error_response("Class not found", 404)
    
    options = Validator.validate_session_options(
        request.get_json(silent=True),
        default_window=current_app.config['QR_ROTATION_WINDOW_SECONDS'],
        default_late_minutes=current_app.config['LATE_THRESHOLD_MINUTES']
    )
    state = get_state()
    # SessionAlreadyLiveError is mapped to 409 by the app error handler
    session = state.store.start_session(
        class_section,
        options['rotation_window_seconds'],
        options['late_threshold_minutes'],
        now=state.clock()
    )
    
    return success_response(
        data=session.to_dict(),
        message="Session started",
        status_code=201
    )

@sessions_bp.route('/end/<class_id>', methods=['POST'])
def end_session(class_id):
    """End and lock the live session of a class."""
    class_section = _get_class_or_none(class_id)
    if class_section is None:
        return error_response("Class not found", 404)
    
    state = get_state()
    session = state.store.end_session(class_section, now=state.clock())
    if session is None:
        return success_response(message="No live session to end")
    
    return success_response(
        data={**session.to_dict(), 'attendance_count': state.ledger.count_for(session.id)},
        message="Session ended"
    )

@sessions_bp.route('/active/<class_id>', methods=['GET'])
def active_session(class_id):
    """Get the live session of a class, if any."""
    if _get_class_or_none(class_id) is None:
        return error_response("Class not found", 404)
    
    state = get_state()
    session = state.store.active_session_for(class_id)
    if session is None:
        return success_response(data=None, message="No live session")
    
    return success_response(data={
        **session.to_dict(),
        'attendance_count': state.ledger.count_for(session.id)
    })

@sessions_bp.route('/<session_id>/token', methods=['GET'])
def session_token(session_id):
    """Current rotating token; ``?image=1`` adds a PNG QR code."""
    state = get_state()
    session = state.store.get_session(session_id)
    if session is None:
        return error_response("Session not found", 404)
    if not session.is_live:
        return error_response("Session has ended", 400)
    
    now = state.clock()
    token = state.token_for(session)
    window = session.rotation_window_seconds
    bucket = time_bucket(now, window)
    
    data = {
        'session_id': session.id,
        'token': token,
        'bucket': bucket,
        'rotation_window_seconds': window,
        'refresh_in_seconds': (bucket + 1) * window - now.timestamp()
    }
    if request.args.get('image') in ('1', 'true', 'yes'):
        data['qr_image'] = TokenService.render_qr_image(token)
    
    return success_response(data=data)

@sessions_bp.route('/<session_id>/count', methods=['GET'])
def session_count(session_id):
    """Live attendee count for a session."""
    state = get_state()
    if state.store.get_session(session_id) is None:
        return error_response("Session not found", 404)
    
    return success_response(data={
        'session_id': session_id,
        'attendance_count': state.ledger.count_for(session_id)
    })

"""Attendance scanning, history and export API endpoints."""
from flask import Blueprint, Response, current_app, request
from attendly import limiter
from attendly.api import get_state
from attendly.services.export_service import ExportService
from attendly.utils.helpers import success_response, error_response
from attendly.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)

def _scan_limit():
    return current_app.config['SCAN_RATE_LIMIT']

def _token_from_request():
    data = request.get_json(silent=True) or {}
    token = data.get('token')
    if not isinstance(token, str) or not token.strip():
        return None, data
    return token, data

@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')

@attendance_bp.route('/scan', methods=['POST'])
@limiter.limit(_scan_limit)
def scan():
    """
    Verify a scanned token for this device's student.
    
    Every outcome is returned with status 200; only a request without a
    token or with unusable coordinates is a 400.
    """
    token, data = _token_from_request()
    if token is None:
        return error_response("Token is required", 400)
    
    location = Validator.validate_location(data)
    outcome = get_state().verify_scan(token, location)
    
    return success_response(data=outcome.to_dict(), message=outcome.result.message)

@attendance_bp.route('/preview', methods=['POST'])
def preview():
    """Describe the class behind a scan before the student joins it."""
    token, _ = _token_from_request()
    if token is None:
        return error_response("Token is required", 400)
    
    state = get_state()
    return success_response(data=state.engine.preview(token, state.student_profile.id))

@attendance_bp.route('/history', methods=['GET'])
def history():
    """This student's attendance, newest first."""
    state = get_state()
    records = []
    for record in state.attendance_history():
        item = record.to_dict()
        item['class_name'] = state.class_name_for(record)
        records.append(item)
    
    return success_response(data=records)

@attendance_bp.route('/summary', methods=['GET'])
def summary():
    """This student's rolling counters and attendance percentage."""
    state = get_state()
    return success_response(data={
        'student': state.student_profile.to_dict(),
        'summary': state.summary().to_dict(),
        'classes': [c.to_dict() for c in state.store.enrolled_classes(state.student_profile.id)]
    })

@attendance_bp.route('/export', methods=['GET'])
def export_csv():
    """All records on this device as CSV, optionally for one session."""
    state = get_state()
    session_id = request.args.get('session_id')
    if session_id:
        records = state.ledger.records_for_session(session_id)
    else:
        records = state.ledger.all_records()
    
    return Response(
        ExportService.to_csv(records),
        mimetype='text/csv',
        headers={'Content-Disposition': 'attachment; filename=attendance.csv'}
    )

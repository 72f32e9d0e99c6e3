"""HTTP API blueprints."""
from flask import current_app

def get_state():
    """The DeviceState owned by the running application."""
    return current_app.extensions['attendly']

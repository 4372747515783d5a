from functools import wraps
from flask import request, current_app, make_response
from clinic.utils.errors import ClinicError, ValidationError


def current_actor_id():
    """Staff member acting on this request, taken from the X-Staff-Id header."""
    raw = request.headers.get('X-Staff-Id')
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError("X-Staff-Id must be a staff id", field='X-Staff-Id', value=raw)


def audit_log(action, resource):
    """Logs every API action and its outcome to the audit logger."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            actor = request.headers.get('X-Staff-Id')
            ip_address = request.remote_addr
            try:
                response = make_response(f(*args, **kwargs))
            except ClinicError as e:
                current_app.audit_logger.info(
                    f"Action='{action}', Resource='{resource}', StaffID='{actor}', IP='{ip_address}', "
                    f"Success='False', Details='{e.error_type}: {e.message}'"
                )
                raise
            except Exception as e:
                current_app.audit_logger.error(
                    f"Action='{action}', Resource='{resource}', StaffID='{actor}', IP='{ip_address}', "
                    f"Success='False', Details='An error occurred: {str(e)}'"
                )
                raise

            success = response.status_code < 400
            current_app.audit_logger.info(
                f"Action='{action}', Resource='{resource}', StaffID='{actor}', IP='{ip_address}', "
                f"Success='{success}', Details='Status: {response.status_code}'"
            )
            return response
        return decorated_function
    return decorator

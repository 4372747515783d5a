# /clinic/utils/error_handlers.py
from flask import jsonify, current_app
from clinic.extensions import db
from clinic.utils.errors import ClinicError

def register_error_handlers(app):
    @app.errorhandler(ClinicError)
    def clinic_error(error):
        current_app.logger.info(f"Request rejected ({error.error_type}): {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Resource not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.audit_logger.error(f"Internal server error: {str(error)}")
        return jsonify({'error': 'Internal server error'}), 500

from flask import request, jsonify
from clinic.utils.errors import ValidationError


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def missing_fields_response(data, required):
    """Returns a 400 response naming missing fields, or None when all are present."""
    missing = [field for field in required if data.get(field) in (None, '')]
    if missing:
        return jsonify({'error': 'Missing required fields', 'fields': missing}), 400
    return None

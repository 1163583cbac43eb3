"""Flask-WTF forms, validated against JSON request bodies."""

from flask import jsonify


def validation_error(form, message='Validation failed'):
    """Standard 400 response for a form that did not validate."""
    return jsonify({'message': message, 'errors': form.errors}), 400


def populate_from_json(form, obj, payload, exclude=()):
    """Copy validated fields that the JSON payload actually sent onto a model."""
    for field in form:
        if field.name in exclude or field.name not in payload:
            continue
        if hasattr(obj, field.name):
            setattr(obj, field.name, field.data)

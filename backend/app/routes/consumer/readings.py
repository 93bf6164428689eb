"""Blood pressure and glucose reading routes (Premium)."""
from datetime import datetime, timedelta
from flask import request, jsonify, g, abort
from app import db
from app.errors import ValidationError, commit_or_raise
from app.models import BloodPressureReading, DiabeticReading
from app.rules.classifier import BP_CATEGORIES, GLUCOSE_CATEGORIES
from app.utils.auth import token_required
from app.utils.audit_logger import audit_log, audited
from app.utils.subscriptions import subscription_required
from app.utils.validators import validate_bp_reading, validate_glucose_reading, parse_timestamp
from . import consumer_bp, json_body


def _page_args():
    limit = min(request.args.get('limit', 50, type=int), 200)
    offset = request.args.get('offset', 0, type=int)
    return limit, offset


def _reading_time(data):
    return parse_timestamp(data['timestamp']) if data.get('timestamp') else datetime.utcnow()


def _delete_owned(model, item_id, resource_type):
    reading = db.session.get(model, item_id)
    if not reading or reading.user_id != g.user_id:
        abort(404, description='Reading not found')
    db.session.delete(reading)
    commit_or_raise('delete the reading')
    audit_log('DELETE', resource_type, resource_id=str(item_id))
    return jsonify({'message': 'Reading deleted'}), 200


# ---------- Blood pressure ----------

@consumer_bp.route('/blood-pressure', methods=['POST'])
@token_required
@subscription_required('blood_pressure_manager')
def create_bp_reading():
    data = json_body()

    errors = validate_bp_reading(data)
    if errors:
        raise ValidationError(errors)

    reading_date = _reading_time(data)
    systolic = int(data['systolic'])
    diastolic = int(data['diastolic'])

    # Double-submitted form: identical values within a minute return the existing row
    window = timedelta(seconds=60)
    duplicate = BloodPressureReading.query.filter(
        BloodPressureReading.user_id == g.user_id,
        BloodPressureReading.systolic == systolic,
        BloodPressureReading.diastolic == diastolic,
        BloodPressureReading.reading_date.between(reading_date - window, reading_date + window)
    ).first()
    if duplicate:
        return jsonify(duplicate.to_dict()), 200

    conditions = data.get('conditions') or {}
    reading = BloodPressureReading(
        user_id=g.user_id,
        systolic=systolic,
        diastolic=diastolic,
        pulse=int(data['pulse']),
        reading_date=reading_date,
        arm=data.get('arm') or None,
        position=data.get('position') or None,
        meal_condition=conditions.get('meal') or None,
        medicine_condition=conditions.get('medicine') or None,
        activity_condition=conditions.get('activity') or None,
        description=(data.get('description') or '').strip() or None,
    )
    db.session.add(reading)
    commit_or_raise('save the reading')

    audit_log('CREATE', 'bp_reading', resource_id=str(reading.id),
              details={'category': reading.category.key})
    return jsonify(reading.to_dict()), 201


@consumer_bp.route('/blood-pressure', methods=['GET'])
@token_required
@subscription_required('blood_pressure_manager')
@audited('READ', 'bp_reading')
def list_bp_readings():
    """Newest first, paginated."""
    limit, offset = _page_args()
    readings = (BloodPressureReading.query
                .filter_by(user_id=g.user_id)
                .order_by(BloodPressureReading.reading_date.desc())
                .offset(offset)
                .limit(limit)
                .all())
    return jsonify([r.to_dict() for r in readings]), 200


@consumer_bp.route('/blood-pressure/trend', methods=['GET'])
@token_required
@subscription_required('blood_pressure_manager')
def bp_trend():
    """Oldest first, for charting."""
    readings = (BloodPressureReading.query
                .filter_by(user_id=g.user_id)
                .order_by(BloodPressureReading.reading_date.asc())
                .all())
    return jsonify([
        {
            'timestamp': r.reading_date.isoformat(),
            'systolic': r.systolic,
            'diastolic': r.diastolic,
            'pulse': r.pulse,
            'category': r.category.key,
        }
        for r in readings
    ]), 200


@consumer_bp.route('/blood-pressure/<int:item_id>', methods=['DELETE'])
@token_required
@subscription_required('blood_pressure_manager')
def delete_bp_reading(item_id):
    return _delete_owned(BloodPressureReading, item_id, 'bp_reading')


# ---------- Glucose ----------

@consumer_bp.route('/glucose', methods=['POST'])
@token_required
@subscription_required('diabetic_manager')
def create_glucose_reading():
    data = json_body()

    errors = validate_glucose_reading(data)
    if errors:
        raise ValidationError(errors)

    reading = DiabeticReading(
        user_id=g.user_id,
        glucose_level=int(data['glucose_level']),
        reading_type=data['reading_type'],
        reading_date=_reading_time(data),
    )
    db.session.add(reading)
    commit_or_raise('save the reading')

    audit_log('CREATE', 'glucose_reading', resource_id=str(reading.id),
              details={'category': reading.category.key})
    return jsonify(reading.to_dict()), 201


@consumer_bp.route('/glucose', methods=['GET'])
@token_required
@subscription_required('diabetic_manager')
@audited('READ', 'glucose_reading')
def list_glucose_readings():
    limit, offset = _page_args()
    readings = (DiabeticReading.query
                .filter_by(user_id=g.user_id)
                .order_by(DiabeticReading.reading_date.desc())
                .offset(offset)
                .limit(limit)
                .all())
    return jsonify([r.to_dict() for r in readings]), 200


@consumer_bp.route('/glucose/trend', methods=['GET'])
@token_required
@subscription_required('diabetic_manager')
def glucose_trend():
    readings = (DiabeticReading.query
                .filter_by(user_id=g.user_id)
                .order_by(DiabeticReading.reading_date.asc())
                .all())
    return jsonify([
        {
            'timestamp': r.reading_date.isoformat(),
            'glucose_level': r.glucose_level,
            'reading_type': r.reading_type,
            'category': r.category.key,
        }
        for r in readings
    ]), 200


@consumer_bp.route('/glucose/<int:item_id>', methods=['DELETE'])
@token_required
@subscription_required('diabetic_manager')
def delete_glucose_reading(item_id):
    return _delete_owned(DiabeticReading, item_id, 'glucose_reading')


@consumer_bp.route('/reading-categories', methods=['GET'])
def reading_categories():
    return jsonify({
        'blood_pressure': [c.to_dict() for c in BP_CATEGORIES],
        'glucose': [c.to_dict() for c in GLUCOSE_CATEGORIES],
    }), 200

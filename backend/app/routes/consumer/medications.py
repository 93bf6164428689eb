"""Medication routes: CRUD, enable toggle, alerts and refill estimates."""
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from flask import request, jsonify, g, abort
from app import db
from app.errors import ValidationError, commit_or_raise
from app.models import Medication
from app.rules.alerts import compute_alerts, time_of_day
from app.rules.course import Course, visible_medications
from app.utils.auth import token_required
from app.utils.audit_logger import audit_log, audited
from app.utils.refill_estimator import estimate_refill
from app.utils.subscriptions import check_medication_limit
from app.utils.validators import validate_medication, normalize_dose_times, parse_date
from . import consumer_bp, json_body


def viewer_now():
    """Current time in the viewer's zone (``tz``), optionally pinned by ``at``."""
    tz_name = request.args.get('tz', 'UTC')
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f'Unknown time zone: {tz_name}')

    at = request.args.get('at')
    if not at:
        return datetime.now(tz)
    try:
        moment = datetime.fromisoformat(at.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError('at must be an ISO 8601 date-time')
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _get_owned_medication(medication_id):
    med = db.session.get(Medication, medication_id)
    if not med or med.user_id != g.user_id:
        abort(404, description='Medication not found')
    return med


def _apply_fields(med, data):
    if 'name' in data:
        med.name = str(data['name']).strip()
    if 'quantity' in data:
        med.quantity = int(data['quantity'])
    if 'dose_times' in data:
        med.dose_times = normalize_dose_times(data['dose_times'] or [])
    if 'expiry_date' in data:
        med.expiry_date = parse_date(data['expiry_date']) if data['expiry_date'] else None
    if 'active' in data:
        med.active = data['active']
    if 'instructions' in data:
        med.instructions = str(data['instructions']).strip() if data['instructions'] else None
    if 'course' in data:
        course = data['course']
        med.course = Course(
            duration_days=int(course['duration_days']),
            start_date=parse_date(course['start_date']),
        ) if course else None


@consumer_bp.route('/medications', methods=['GET'])
@token_required
def list_medications():
    """Visible medications; ``show_inactive=true`` includes disabled and finished ones."""
    now = viewer_now()
    show_inactive = request.args.get('show_inactive', 'false').lower() == 'true'

    medications = g.user.medications.order_by(Medication.created_at.asc(), Medication.id.asc()).all()
    visible = visible_medications(medications, now, show_inactive)

    return jsonify({
        'medications': [m.to_dict(now=now) for m in visible],
        'total_count': len(medications),
    }), 200


@consumer_bp.route('/medications', methods=['POST'])
@token_required
def create_medication():
    data = json_body()

    errors = validate_medication(data)
    if errors:
        raise ValidationError(errors)

    check_medication_limit(g.user)

    med = Medication(user_id=g.user_id, active=True)
    _apply_fields(med, data)
    db.session.add(med)
    commit_or_raise('add the medication')

    audit_log('CREATE', 'medication', resource_id=str(med.id))
    return jsonify(med.to_dict(now=viewer_now())), 201


@consumer_bp.route('/medications/<int:medication_id>', methods=['GET'])
@token_required
def get_medication(medication_id):
    med = _get_owned_medication(medication_id)
    return jsonify(med.to_dict(now=viewer_now())), 200


@consumer_bp.route('/medications/<int:medication_id>', methods=['PUT'])
@token_required
def update_medication(medication_id):
    data = json_body()

    med = _get_owned_medication(medication_id)

    errors = validate_medication(data, partial=True)
    if errors:
        raise ValidationError(errors)

    _apply_fields(med, data)
    commit_or_raise('update the medication')

    audit_log('UPDATE', 'medication', resource_id=str(med.id),
              details={'fields_changed': sorted(data.keys())})
    return jsonify(med.to_dict(now=viewer_now())), 200


@consumer_bp.route('/medications/<int:medication_id>/toggle', methods=['POST'])
@token_required
def toggle_medication(medication_id):
    """Enable or disable reminders for a medication."""
    med = _get_owned_medication(medication_id)
    med.active = med.active is False
    commit_or_raise('update the medication')

    audit_log('UPDATE', 'medication', resource_id=str(med.id),
              details={'action': 'toggle', 'active': med.active})
    return jsonify(med.to_dict(now=viewer_now())), 200


@consumer_bp.route('/medications/<int:medication_id>', methods=['DELETE'])
@token_required
def delete_medication(medication_id):
    med = _get_owned_medication(medication_id)
    db.session.delete(med)
    commit_or_raise('delete the medication')

    audit_log('DELETE', 'medication', resource_id=str(medication_id))
    return jsonify({'message': 'Medication deleted'}), 200


@consumer_bp.route('/medications/alerts', methods=['GET'])
@token_required
def get_alerts():
    """Dose reminders for the current minute and low-stock warnings."""
    now = viewer_now()
    alerts = compute_alerts(g.user.medications.all(), now)

    return jsonify({
        'status': alerts.status,
        'evaluated_at': now.isoformat(),
        'time_of_day': time_of_day(now),
        'dose_time_alerts': [
            {'id': m.id, 'name': m.name, 'message': f"It's time to take your {m.name}."}
            for m in alerts.dose_time_alerts
        ],
        'low_stock_alerts': [
            {
                'id': m.id,
                'name': m.name,
                'quantity': m.quantity,
                'message': f"You are running low on {m.name}. Only {m.quantity} "
                           f"dose{'s' if m.quantity != 1 else ''} left.",
            }
            for m in alerts.low_stock_alerts
        ],
    }), 200


@consumer_bp.route('/medications/<int:medication_id>/refill-estimate', methods=['POST'])
@token_required
@audited('READ', 'refill_estimate')
def refill_estimate(medication_id):
    """Suggest a refill date. Advisory only; the stored quantity is untouched."""
    med = _get_owned_medication(medication_id)
    estimate = estimate_refill(med.name, med.quantity, med.dose_times, today=viewer_now().date())
    return jsonify(estimate.to_dict()), 200

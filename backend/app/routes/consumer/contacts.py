"""Emergency contact routes and the low-stock WhatsApp link."""
from flask import request, jsonify, g
from app.errors import ValidationError
from app.rules.alerts import compute_alerts, low_stock_message, whatsapp_link
from app.utils.auth import token_required
from app.utils.audit_logger import audit_log
from app.utils.contact_store import contact_store
from app.utils.validators import validate_emergency_contact
from . import consumer_bp, json_body
from .medications import viewer_now


@consumer_bp.route('/emergency-contact', methods=['GET'])
@token_required
def get_emergency_contact():
    contact = contact_store.get(g.user_id)
    return jsonify({'contact': contact.to_dict() if contact else None}), 200


@consumer_bp.route('/emergency-contact', methods=['PUT'])
@token_required
def save_emergency_contact():
    data = json_body()

    errors = validate_emergency_contact(data)
    if errors:
        raise ValidationError(errors)

    contact = contact_store.save(g.user_id, data['name'].strip(), data['phone'].strip())
    return jsonify({'contact': contact.to_dict()}), 200


@consumer_bp.route('/emergency-contact', methods=['DELETE'])
@token_required
def remove_emergency_contact():
    if not contact_store.remove(g.user_id):
        return jsonify({'error': 'No emergency contact set'}), 404
    return jsonify({'message': 'Emergency contact removed'}), 200


@consumer_bp.route('/emergency-contact/low-stock-link', methods=['GET'])
@token_required
def low_stock_link():
    """WhatsApp deep link listing low-stock medications. Nothing is sent from here."""
    contact = contact_store.get(g.user_id)
    if contact is None:
        return jsonify({'error': 'Please set an emergency contact name and number first.'}), 409

    alerts = compute_alerts(g.user.medications.all(), viewer_now())
    if not alerts.low_stock_alerts:
        return jsonify({'url': None, 'message': 'All your medications are well-stocked.'}), 200

    message = low_stock_message(contact.name, alerts.low_stock_alerts)
    audit_log('READ', 'emergency_contact', resource_id=str(g.user_id),
              details={'action': 'low_stock_link', 'count': len(alerts.low_stock_alerts)})
    return jsonify({'url': whatsapp_link(contact.phone, message), 'message': message}), 200

"""
Emergency contact store with typed change notifications.

Callers read and write contacts only through ``contact_store``; every save or
removal publishes a ContactChanged event to the subscribed callbacks.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from app import db
from app.errors import commit_or_raise
from app.models.emergency_contact import EmergencyContact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactDetails:
    name: str
    phone: str

    def to_dict(self):
        return {'name': self.name, 'phone': self.phone}


@dataclass(frozen=True)
class ContactChanged:
    user_id: int
    kind: str  # 'saved' or 'removed'
    contact: Optional[ContactDetails]


Listener = Callable[[ContactChanged], None]


class EmergencyContactStore:

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener):
        """Register a callback; subscribing the same callback twice is a no-op."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def get(self, user_id) -> Optional[ContactDetails]:
        row = EmergencyContact.query.filter_by(user_id=user_id).first()
        if row is None:
            return None
        return ContactDetails(name=row.name, phone=row.phone)

    def save(self, user_id, name: str, phone: str) -> ContactDetails:
        row = EmergencyContact.query.filter_by(user_id=user_id).first()
        if row is None:
            row = EmergencyContact(user_id=user_id)
            db.session.add(row)
        row.name = name
        row.phone = phone
        commit_or_raise('save the emergency contact')

        details = ContactDetails(name=name, phone=phone)
        self._publish(ContactChanged(user_id=user_id, kind='saved', contact=details))
        return details

    def remove(self, user_id) -> bool:
        row = EmergencyContact.query.filter_by(user_id=user_id).first()
        if row is None:
            return False
        db.session.delete(row)
        commit_or_raise('remove the emergency contact')
        self._publish(ContactChanged(user_id=user_id, kind='removed', contact=None))
        return True

    def _publish(self, event: ContactChanged):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # The write already committed; a failing listener must not undo it.
                logger.error('Emergency contact listener %r failed', listener, exc_info=True)


def audit_contact_change(event: ContactChanged):
    from app.utils.audit_logger import audit_log
    action = 'UPDATE' if event.kind == 'saved' else 'DELETE'
    audit_log(action, 'emergency_contact', resource_id=str(event.user_id),
              details={'action': f'contact_{event.kind}'}, user_id=str(event.user_id))


contact_store = EmergencyContactStore()

"""
Medication model.
"""
import json
from datetime import datetime
from app import db
from app.rules.course import Course, is_effectively_active, remaining_course_days, course_end_date


class Medication(db.Model):
    """
    A tracked medication with its dosing schedule and optional course.
    Dose times are stored as a JSON array of zero-padded "HH:MM" strings.
    """
    __tablename__ = 'medications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    _dose_times = db.Column('dose_times', db.Text, nullable=False, default='[]')
    expiry_date = db.Column(db.Date, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    instructions = db.Column(db.Text, nullable=True)

    # Embedded course; both set or both null
    course_duration_days = db.Column(db.Integer, nullable=True)
    course_start_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def dose_times(self):
        return json.loads(self._dose_times) if self._dose_times else []

    @dose_times.setter
    def dose_times(self, value):
        self._dose_times = json.dumps(list(value or []))

    @property
    def course(self):
        if self.course_duration_days is None or self.course_start_date is None:
            return None
        return Course(duration_days=self.course_duration_days, start_date=self.course_start_date)

    @course.setter
    def course(self, value):
        if value is None:
            self.course_duration_days = None
            self.course_start_date = None
        else:
            self.course_duration_days = value.duration_days
            self.course_start_date = value.start_date

    def to_dict(self, now=None):
        """Convert to dictionary; with ``now`` the derived course state is included."""
        course = self.course
        data = {
            'id': self.id,
            'name': self.name,
            'quantity': self.quantity,
            'dose_times': self.dose_times,
            'expiry_date': self.expiry_date.isoformat() if self.expiry_date else None,
            'active': self.active is not False,
            'instructions': self.instructions,
            'course': course.to_dict() if course else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if now is not None:
            end = course_end_date(self)
            data['effectively_active'] = is_effectively_active(self, now)
            data['remaining_course_days'] = remaining_course_days(self, now)
            data['course_end_date'] = end.isoformat() if end else None
        return data

    def __repr__(self):
        return f'<Medication {self.id}: {self.name}>'

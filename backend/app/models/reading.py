"""
Blood Pressure Reading model.
"""
from datetime import datetime
from app import db
from app.rules.classifier import classify_blood_pressure


class BloodPressureReading(db.Model):
    """
    One logged blood pressure measurement.
    Readings are never edited; a wrong entry is deleted and logged again.
    """
    __tablename__ = 'blood_pressure_readings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    pulse = db.Column(db.Integer, nullable=False)

    reading_date = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Measurement context
    arm = db.Column(db.String(10), nullable=True)             # left, right
    position = db.Column(db.String(10), nullable=True)        # sitting, laying, standing
    meal_condition = db.Column(db.String(10), nullable=True)      # before, after
    medicine_condition = db.Column(db.String(10), nullable=True)  # before, after
    activity_condition = db.Column(db.String(10), nullable=True)  # before, after
    description = db.Column(db.Text, nullable=True)

    @property
    def category(self):
        return classify_blood_pressure(self.systolic, self.diastolic)

    def conditions(self):
        conditions = {
            'meal': self.meal_condition,
            'medicine': self.medicine_condition,
            'activity': self.activity_condition,
        }
        return {k: v for k, v in conditions.items() if v}

    def to_dict(self):
        return {
            'id': self.id,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'pulse': self.pulse,
            'reading_date': self.reading_date.isoformat() if self.reading_date else None,
            'arm': self.arm,
            'position': self.position,
            'conditions': self.conditions(),
            'description': self.description,
            'category': self.category.to_dict(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<BloodPressureReading {self.id}: {self.systolic}/{self.diastolic}>'

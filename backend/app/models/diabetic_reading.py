"""
Blood glucose reading model.
"""
from datetime import datetime
from app import db
from app.rules.classifier import classify_glucose


class DiabeticReading(db.Model):
    """One logged glucose measurement in mg/dL."""
    __tablename__ = 'diabetic_readings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    glucose_level = db.Column(db.Integer, nullable=False)
    reading_type = db.Column(db.String(10), nullable=False, default='fasting')

    reading_date = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @property
    def category(self):
        return classify_glucose(self.glucose_level, self.reading_type)

    def to_dict(self):
        return {
            'id': self.id,
            'glucose_level': self.glucose_level,
            'reading_type': self.reading_type,
            'reading_date': self.reading_date.isoformat() if self.reading_date else None,
            'category': self.category.to_dict(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<DiabeticReading {self.id}: {self.glucose_level} ({self.reading_type})>'

from datetime import datetime
from dinnerlog import db


class Event(db.Model):
    """Dinner event. Modeled as a single point in time."""
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    date = db.Column(db.DateTime, nullable=False, index=True)
    location = db.Column(db.String(200), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    guest_links = db.relationship('EventGuest', backref='event', lazy='dynamic', cascade='all, delete-orphan')
    dish_links = db.relationship('EventDish', backref='event', lazy='dynamic', cascade='all, delete-orphan')

    EDITABLE_FIELDS = ('title', 'date', 'location', 'notes')

    def __repr__(self):
        return f'<Event {self.title} {self.date}>'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'date': self.date.isoformat() if self.date else None,
            'location': self.location,
            'notes': self.notes,
            'guest_ids': sorted(link.guest_id for link in self.guest_links),
            'dish_ids': sorted(link.dish_id for link in self.dish_links),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

from datetime import datetime
from dinnerlog import db


class Guest(db.Model):
    """Person who gets invited to dinners."""
    __tablename__ = 'guests'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    dietary_restrictions = db.Column(db.JSON, default=list)  # e.g. ["vegetarian", "no nuts"]
    tags = db.Column(db.JSON, default=list)
    notes = db.Column(db.Text, nullable=True)
    favorite_categories = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    attendances = db.relationship('EventGuest', backref='guest', lazy='dynamic', cascade='all, delete-orphan')
    favorites = db.relationship('GuestDishFavorite', backref='guest', lazy='dynamic', cascade='all, delete-orphan')

    EDITABLE_FIELDS = ('name', 'email', 'phone', 'dietary_restrictions', 'tags', 'notes', 'favorite_categories')

    def __repr__(self):
        return f'<Guest {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'dietary_restrictions': self.dietary_restrictions or [],
            'tags': self.tags or [],
            'notes': self.notes,
            'favorite_categories': self.favorite_categories or [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

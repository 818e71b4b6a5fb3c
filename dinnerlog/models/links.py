from datetime import datetime
from dinnerlog import db


class EventGuest(db.Model):
    """Record of a guest attending an event."""
    __tablename__ = 'event_guests'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Unique constraint: one attendance record per guest per event
    __table_args__ = (
        db.UniqueConstraint('event_id', 'guest_id', name='unique_event_guest'),
    )

    def __repr__(self):
        return f'<EventGuest event={self.event_id} guest={self.guest_id}>'

    def to_dict(self):
        return {'id': self.id, 'event_id': self.event_id, 'guest_id': self.guest_id}


class EventDish(db.Model):
    """Record of a dish served at an event."""
    __tablename__ = 'event_dishes'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True)
    dish_id = db.Column(db.Integer, db.ForeignKey('dishes.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('event_id', 'dish_id', name='unique_event_dish'),
    )

    def __repr__(self):
        return f'<EventDish event={self.event_id} dish={self.dish_id}>'

    def to_dict(self):
        return {'id': self.id, 'event_id': self.event_id, 'dish_id': self.dish_id}


class GuestDishFavorite(db.Model):
    """Dish a guest is known to love."""
    __tablename__ = 'guest_dish_favorites'

    id = db.Column(db.Integer, primary_key=True)
    guest_id = db.Column(db.Integer, db.ForeignKey('guests.id', ondelete='CASCADE'), nullable=False, index=True)
    dish_id = db.Column(db.Integer, db.ForeignKey('dishes.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('guest_id', 'dish_id', name='unique_guest_favorite'),
    )

    def __repr__(self):
        return f'<GuestDishFavorite guest={self.guest_id} dish={self.dish_id}>'

    def to_dict(self):
        return {'id': self.id, 'guest_id': self.guest_id, 'dish_id': self.dish_id}

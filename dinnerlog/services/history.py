"""Per-guest and per-dish serving history."""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from dinnerlog import db
from dinnerlog.models import Event, EventGuest, EventDish, Dish, Guest
from dinnerlog.services.advisor import UpstreamUnavailable


def guest_meal_history(user_id: str, guest_id: int) -> list:
    """Every dish served to a guest, newest event first."""
    query = db.session.query(Event, Dish).join(
        EventGuest, EventGuest.event_id == Event.id
    ).join(
        EventDish, EventDish.event_id == Event.id
    ).join(
        Dish, EventDish.dish_id == Dish.id
    ).filter(
        Event.user_id == user_id,
        EventGuest.guest_id == guest_id,
    ).order_by(Event.date.desc(), Event.id, Dish.title)

    try:
        rows = query.all()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Meal history query failed for guest {guest_id}: {e}")
        raise UpstreamUnavailable('Could not load meal history') from e

    return [
        {
            'event': {'id': event.id, 'title': event.title, 'location': event.location},
            'dish': {'id': dish.id, 'title': dish.title, 'category': dish.category},
            'event_date': event.date.isoformat(),
        }
        for event, dish in rows
    ]


def dish_history(user_id: str, dish_id: int) -> list:
    """Events that served a dish, with the names of the guests present."""
    query = db.session.query(Event, Guest.name).join(
        EventDish, EventDish.event_id == Event.id
    ).join(
        EventGuest, EventGuest.event_id == Event.id
    ).join(
        Guest, EventGuest.guest_id == Guest.id
    ).filter(
        Event.user_id == user_id,
        EventDish.dish_id == dish_id,
    ).order_by(Event.date.desc(), Event.id, Guest.name)

    try:
        rows = query.all()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Dish history query failed for dish {dish_id}: {e}")
        raise UpstreamUnavailable('Could not load dish history') from e

    history = []
    by_event = {}
    for event, guest_name in rows:
        entry = by_event.get(event.id)
        if entry is None:
            entry = {
                'event': {'id': event.id, 'title': event.title, 'location': event.location},
                'guests': [],
                'event_date': event.date.isoformat(),
            }
            by_event[event.id] = entry
            history.append(entry)
        entry['guests'].append(guest_name)
    return history

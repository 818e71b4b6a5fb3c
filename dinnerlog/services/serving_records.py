"""
Serving-record queries.

A serving record is one (event, guest, dish) triple: the guest attended the
event and the dish was served at it. The rows only exist as a join over
event_guests, events and event_dishes.
"""

from datetime import datetime
from typing import Iterable, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from dinnerlog import db
from dinnerlog.models import Event, EventGuest, EventDish
from dinnerlog.services.advisor import ServingRecord, UpstreamUnavailable


def serving_query(user_id: str):
    """Base join for a user's serving records, newest event first."""
    return db.session.query(
        EventGuest.guest_id,
        EventDish.dish_id,
        Event.id,
        Event.title,
        Event.date,
    ).join(
        Event, EventGuest.event_id == Event.id
    ).join(
        EventDish, EventDish.event_id == Event.id
    ).filter(
        Event.user_id == user_id
    ).order_by(Event.date.desc(), Event.id, EventGuest.guest_id, EventDish.dish_id)


def fetch_serving_records(user_id: str, since: Optional[datetime] = None,
                          guest_ids: Optional[Iterable[int]] = None,
                          dish_ids: Optional[Iterable[int]] = None) -> list:
    """
    Load serving records for a user's events.

    Args:
        user_id: Owner of the events
        since: Only events on or after this time
        guest_ids: Only these guests (None means all)
        dish_ids: Only these dishes (None means all)

    Returns:
        list of ServingRecord

    Raises:
        UpstreamUnavailable: if the database query fails
    """
    query = serving_query(user_id)
    if since is not None:
        query = query.filter(Event.date >= since)
    if guest_ids is not None:
        query = query.filter(EventGuest.guest_id.in_(list(guest_ids)))
    if dish_ids is not None:
        query = query.filter(EventDish.dish_id.in_(list(dish_ids)))

    try:
        rows = query.all()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Serving record query failed for user {user_id}: {e}")
        raise UpstreamUnavailable('Could not load serving history') from e

    return [
        ServingRecord(guest_id=guest_id, dish_id=dish_id, event_id=event_id,
                      event_title=title, served_at=served_at)
        for guest_id, dish_id, event_id, title, served_at in rows
    ]

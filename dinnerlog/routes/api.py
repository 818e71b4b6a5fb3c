"""
API routes for the single-page client.

Includes:
- Guest, dish and event CRUD
- Attaching guests and dishes to events
- Guest favorites
- Meal and dish history
- Repeat-dish alerts and recently served dishes
"""

from datetime import datetime, timezone
from flask import Blueprint, request, jsonify, current_app, g

from dinnerlog import db
from dinnerlog.models import Guest, Dish, Event, EventGuest, EventDish, GuestDishFavorite
from dinnerlog.routes.auth import user_required
from dinnerlog.services.advisor import (
    RepeatServingAdvisor,
    InvalidArgument,
    UpstreamUnavailable,
    validate_ids,
)
from dinnerlog.services.serving_records import fetch_serving_records
from dinnerlog.services.history import guest_meal_history, dish_history

api_bp = Blueprint('api', __name__, url_prefix='/api')

STRING_FIELDS = {'name', 'email', 'phone', 'notes', 'title', 'description', 'instructions',
                 'category', 'image_url', 'location'}
LIST_FIELDS = {'dietary_restrictions', 'tags', 'favorite_categories', 'ingredients', 'pairs_with'}
INT_FIELDS = {'prep_time', 'servings'}
REQUIRED_FIELDS = {Guest: 'name', Dish: 'title', Event: 'title'}


# ============== ERROR HANDLING ==============

@api_bp.errorhandler(InvalidArgument)
def handle_invalid_argument(e):
    return jsonify({'success': False, 'error': str(e)}), 400


@api_bp.errorhandler(UpstreamUnavailable)
def handle_upstream_unavailable(e):
    return jsonify({'success': False, 'error': str(e)}), 503


def not_found(what):
    return jsonify({'success': False, 'error': f'{what} not found'}), 404


# ============== HELPERS ==============

def get_advisor():
    return RepeatServingAdvisor(
        fetch_serving_records,
        window=current_app.config.get('REPEAT_WINDOW_MONTHS', 3),
        default_limit=current_app.config.get('RECENTLY_SERVED_LIMIT', 10),
    )


def parse_datetime(value):
    """Parse an ISO 8601 string into a naive UTC datetime."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument('date is required')
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        raise InvalidArgument(f'Invalid date: {value}')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def clean_payload(model, data, partial=False):
    """
    Keep the editable fields of a JSON body and check their types.

    Args:
        model: Model class whose EDITABLE_FIELDS are accepted
        data: Decoded JSON body
        partial: True for updates (required field may be missing)

    Returns:
        dict of column name -> value
    """
    if not isinstance(data, dict):
        raise InvalidArgument('Expected a JSON object')

    values = {}
    for field in model.EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'date':
            value = parse_datetime(value)
        elif value is None:
            pass
        elif field in STRING_FIELDS:
            if not isinstance(value, str):
                raise InvalidArgument(f'{field} must be a string')
            value = value.strip() or None
        elif field in LIST_FIELDS:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise InvalidArgument(f'{field} must be a list of strings')
            value = [v.strip() for v in value if v.strip()]
        elif field in INT_FIELDS:
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidArgument(f'{field} must be a non-negative integer')
        values[field] = value

    required = REQUIRED_FIELDS.get(model)
    if required and (not partial or required in values) and not values.get(required):
        raise InvalidArgument(f'{required} is required')
    if model is Event and not partial and 'date' not in values:
        raise InvalidArgument('date is required')
    return values


def owned(model, entity_id):
    """Fetch one of the current user's rows, or None."""
    return model.query.filter_by(id=entity_id, user_id=g.user.id).first()


def owned_ids(model, ids):
    """Subset of ids that belong to the current user."""
    if not ids:
        return set()
    rows = db.session.query(model.id).filter(model.id.in_(list(ids)), model.user_id == g.user.id).all()
    return {row[0] for row in rows}


def resolve_links(data):
    """Validate guest_ids / dish_ids from a body. Unknown ids are rejected."""
    guest_ids = validate_ids(data.get('guest_ids'), 'guest_ids')
    dish_ids = validate_ids(data.get('dish_ids'), 'dish_ids')

    missing_guests = sorted(guest_ids - owned_ids(Guest, guest_ids))
    missing_dishes = sorted(dish_ids - owned_ids(Dish, dish_ids))
    if missing_guests:
        raise InvalidArgument(f'Unknown guests: {", ".join(map(str, missing_guests))}')
    if missing_dishes:
        raise InvalidArgument(f'Unknown dishes: {", ".join(map(str, missing_dishes))}')
    return guest_ids, dish_ids


def body_id(data, key):
    value = data.get(key) if isinstance(data, dict) else None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f'{key} must be a positive integer')
    return value


# ============== GUESTS ==============

@api_bp.route('/guests')
@user_required
def list_guests():
    guests = Guest.query.filter_by(user_id=g.user.id).order_by(Guest.name.asc()).all()
    return jsonify([guest.to_dict() for guest in guests])


@api_bp.route('/guests/<int:guest_id>')
@user_required
def get_guest(guest_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')
    return jsonify(guest.to_dict())


@api_bp.route('/guests', methods=['POST'])
@user_required
def create_guest():
    values = clean_payload(Guest, request.get_json(silent=True))
    guest = Guest(user_id=g.user.id, **values)
    db.session.add(guest)
    db.session.commit()
    current_app.logger.info(f"Created guest {guest.id} for user {g.user.id}")
    return jsonify(guest.to_dict()), 201


@api_bp.route('/guests/<int:guest_id>', methods=['PUT'])
@user_required
def update_guest(guest_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')

    for field, value in clean_payload(Guest, request.get_json(silent=True), partial=True).items():
        setattr(guest, field, value)
    db.session.commit()
    return jsonify(guest.to_dict())


@api_bp.route('/guests/<int:guest_id>', methods=['DELETE'])
@user_required
def delete_guest(guest_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')

    db.session.delete(guest)
    db.session.commit()
    current_app.logger.info(f"Deleted guest {guest_id} for user {g.user.id}")
    return '', 204


# ============== DISHES ==============

@api_bp.route('/dishes')
@user_required
def list_dishes():
    dishes = Dish.query.filter_by(user_id=g.user.id).order_by(Dish.title.asc()).all()
    return jsonify([dish.to_dict() for dish in dishes])


@api_bp.route('/dishes/<int:dish_id>')
@user_required
def get_dish(dish_id):
    dish = owned(Dish, dish_id)
    if not dish:
        return not_found('Dish')
    return jsonify(dish.to_dict())


@api_bp.route('/dishes', methods=['POST'])
@user_required
def create_dish():
    values = clean_payload(Dish, request.get_json(silent=True))
    dish = Dish(user_id=g.user.id, **values)
    db.session.add(dish)
    db.session.commit()
    current_app.logger.info(f"Created dish {dish.id} for user {g.user.id}")
    return jsonify(dish.to_dict()), 201


@api_bp.route('/dishes/<int:dish_id>', methods=['PUT'])
@user_required
def update_dish(dish_id):
    dish = owned(Dish, dish_id)
    if not dish:
        return not_found('Dish')

    for field, value in clean_payload(Dish, request.get_json(silent=True), partial=True).items():
        setattr(dish, field, value)
    db.session.commit()
    return jsonify(dish.to_dict())


@api_bp.route('/dishes/<int:dish_id>', methods=['DELETE'])
@user_required
def delete_dish(dish_id):
    dish = owned(Dish, dish_id)
    if not dish:
        return not_found('Dish')

    db.session.delete(dish)
    db.session.commit()
    current_app.logger.info(f"Deleted dish {dish_id} for user {g.user.id}")
    return '', 204


# ============== EVENTS ==============

@api_bp.route('/events')
@user_required
def list_events():
    events = Event.query.filter_by(user_id=g.user.id).order_by(Event.date.desc(), Event.id.desc()).all()
    return jsonify([event.to_dict() for event in events])


@api_bp.route('/events/<int:event_id>')
@user_required
def get_event(event_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')
    return jsonify(event.to_dict())


@api_bp.route('/events', methods=['POST'])
@user_required
def create_event():
    """Create an event and attach its guests and dishes in one transaction."""
    data = request.get_json(silent=True)
    values = clean_payload(Event, data)
    guest_ids, dish_ids = resolve_links(data)

    event = Event(user_id=g.user.id, **values)
    db.session.add(event)
    db.session.flush()  # Get the ID

    for guest_id in sorted(guest_ids):
        db.session.add(EventGuest(event_id=event.id, guest_id=guest_id))
    for dish_id in sorted(dish_ids):
        db.session.add(EventDish(event_id=event.id, dish_id=dish_id))
    db.session.commit()

    current_app.logger.info(
        f"Created event {event.id} for user {g.user.id} with {len(guest_ids)} guests, {len(dish_ids)} dishes"
    )
    return jsonify(event.to_dict()), 201


@api_bp.route('/events/<int:event_id>', methods=['PUT'])
@user_required
def update_event(event_id):
    """Update event fields. guest_ids / dish_ids, when given, replace the current links."""
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')

    data = request.get_json(silent=True)
    values = clean_payload(Event, data, partial=True)
    guest_ids, dish_ids = resolve_links(data)

    for field, value in values.items():
        setattr(event, field, value)

    if data.get('guest_ids') is not None:
        EventGuest.query.filter_by(event_id=event.id).delete()
        for guest_id in sorted(guest_ids):
            db.session.add(EventGuest(event_id=event.id, guest_id=guest_id))
    if data.get('dish_ids') is not None:
        EventDish.query.filter_by(event_id=event.id).delete()
        for dish_id in sorted(dish_ids):
            db.session.add(EventDish(event_id=event.id, dish_id=dish_id))

    db.session.commit()
    return jsonify(event.to_dict())


@api_bp.route('/events/<int:event_id>', methods=['DELETE'])
@user_required
def delete_event(event_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')

    db.session.delete(event)
    db.session.commit()
    current_app.logger.info(f"Deleted event {event_id} for user {g.user.id}")
    return '', 204


# ============== EVENT GUESTS / DISHES ==============

@api_bp.route('/events/<int:event_id>/guests', methods=['POST'])
@user_required
def add_event_guest(event_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')
    guest = owned(Guest, body_id(request.get_json(silent=True), 'guest_id'))
    if not guest:
        return not_found('Guest')

    if EventGuest.query.filter_by(event_id=event.id, guest_id=guest.id).first():
        return jsonify({'success': False, 'error': 'Guest already attends this event'}), 409

    link = EventGuest(event_id=event.id, guest_id=guest.id)
    db.session.add(link)
    db.session.commit()
    return jsonify(link.to_dict()), 201


@api_bp.route('/events/<int:event_id>/guests/<int:guest_id>', methods=['DELETE'])
@user_required
def remove_event_guest(event_id, guest_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')

    link = EventGuest.query.filter_by(event_id=event.id, guest_id=guest_id).first()
    if not link:
        return not_found('Guest in event')
    db.session.delete(link)
    db.session.commit()
    return '', 204


@api_bp.route('/events/<int:event_id>/dishes', methods=['POST'])
@user_required
def add_event_dish(event_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')
    dish = owned(Dish, body_id(request.get_json(silent=True), 'dish_id'))
    if not dish:
        return not_found('Dish')

    if EventDish.query.filter_by(event_id=event.id, dish_id=dish.id).first():
        return jsonify({'success': False, 'error': 'Dish already served at this event'}), 409

    link = EventDish(event_id=event.id, dish_id=dish.id)
    db.session.add(link)
    db.session.commit()
    return jsonify(link.to_dict()), 201


@api_bp.route('/events/<int:event_id>/dishes/<int:dish_id>', methods=['DELETE'])
@user_required
def remove_event_dish(event_id, dish_id):
    event = owned(Event, event_id)
    if not event:
        return not_found('Event')

    link = EventDish.query.filter_by(event_id=event.id, dish_id=dish_id).first()
    if not link:
        return not_found('Dish in event')
    db.session.delete(link)
    db.session.commit()
    return '', 204


# ============== FAVORITES ==============

@api_bp.route('/guests/<int:guest_id>/favorites')
@user_required
def list_favorites(guest_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')
    favorites = guest.favorites.order_by(GuestDishFavorite.created_at.asc(), GuestDishFavorite.id.asc()).all()
    return jsonify([favorite.to_dict() for favorite in favorites])


@api_bp.route('/guests/<int:guest_id>/favorites', methods=['POST'])
@user_required
def add_favorite(guest_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')
    dish = owned(Dish, body_id(request.get_json(silent=True), 'dish_id'))
    if not dish:
        return not_found('Dish')

    if GuestDishFavorite.query.filter_by(guest_id=guest.id, dish_id=dish.id).first():
        return jsonify({'success': False, 'error': 'Dish is already a favorite'}), 409

    favorite = GuestDishFavorite(guest_id=guest.id, dish_id=dish.id)
    db.session.add(favorite)
    db.session.commit()
    return jsonify(favorite.to_dict()), 201


@api_bp.route('/guests/<int:guest_id>/favorites/<int:dish_id>', methods=['DELETE'])
@user_required
def remove_favorite(guest_id, dish_id):
    guest = owned(Guest, guest_id)
    if not guest:
        return not_found('Guest')

    favorite = GuestDishFavorite.query.filter_by(guest_id=guest.id, dish_id=dish_id).first()
    if not favorite:
        return not_found('Favorite')
    db.session.delete(favorite)
    db.session.commit()
    return '', 204


# ============== HISTORY & SUGGESTIONS ==============

@api_bp.route('/guests/<int:guest_id>/meal-history')
@user_required
def get_meal_history(guest_id):
    if not owned(Guest, guest_id):
        return not_found('Guest')
    return jsonify(guest_meal_history(g.user.id, guest_id))


@api_bp.route('/dishes/<int:dish_id>/history')
@user_required
def get_dish_history(dish_id):
    if not owned(Dish, dish_id):
        return not_found('Dish')
    return jsonify(dish_history(g.user.id, dish_id))


@api_bp.route('/repeat-dish-alerts', methods=['POST'])
@user_required
def repeat_dish_alerts():
    """
    Warn about candidate guests who already had candidate dishes recently.

    Body:
        guest_ids: list of guest ids
        dish_ids: list of dish ids

    Returns:
        JSON array of alerts, most recent first
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidArgument('Expected a JSON object')

    alerts = get_advisor().find_repeat_alerts(g.user.id, data.get('guest_ids'), data.get('dish_ids'))

    guests = {guest.id: guest for guest in Guest.query.filter(
        Guest.id.in_(sorted({a.guest_id for a in alerts})), Guest.user_id == g.user.id
    )} if alerts else {}
    dishes = {dish.id: dish for dish in Dish.query.filter(
        Dish.id.in_(sorted({a.dish_id for a in alerts})), Dish.user_id == g.user.id
    )} if alerts else {}

    return jsonify([
        {
            'guest': {'id': a.guest_id, 'name': guests[a.guest_id].name if a.guest_id in guests else None},
            'dish': {'id': a.dish_id, 'title': dishes[a.dish_id].title if a.dish_id in dishes else None},
            'last_served': a.last_served.isoformat(),
            'event_title': a.event_title,
        }
        for a in alerts
    ])


@api_bp.route('/recently-served')
@user_required
def recently_served():
    """Most recently served dishes. Query params: limit (positive int)."""
    limit = request.args.get('limit')
    if limit is not None:
        try:
            limit = int(limit)
        except ValueError:
            raise InvalidArgument(f'limit must be a positive integer, got {limit!r}')

    summaries = get_advisor().recently_served_dishes(g.user.id, limit)

    dishes = {dish.id: dish for dish in Dish.query.filter(
        Dish.id.in_([s.dish_id for s in summaries]), Dish.user_id == g.user.id
    )} if summaries else {}

    return jsonify([
        {
            'dish': dishes[s.dish_id].to_dict() if s.dish_id in dishes else {'id': s.dish_id},
            'last_served': s.last_served.isoformat(),
            'times_served': s.times_served,
        }
        for s in summaries
    ])

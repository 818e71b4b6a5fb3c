from datetime import datetime

import pytest

from dinnerlog import create_app, db
from dinnerlog.models import User, Guest, Dish, Event, EventGuest, EventDish


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SECRET_KEY': 'test',
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, user_id='alice', **claims):
    return client.post('/api/auth/login', json={'id': user_id, **claims})


@pytest.fixture
def alice_client(client):
    login(client, 'alice', email='alice@example.com', first_name='Alice')
    return client


def make_user(user_id):
    user = User(id=user_id, email=f'{user_id}@example.com')
    db.session.add(user)
    db.session.commit()
    return user


def make_guest(user, name):
    guest = Guest(user_id=user.id, name=name)
    db.session.add(guest)
    db.session.commit()
    return guest


def make_dish(user, title):
    dish = Dish(user_id=user.id, title=title)
    db.session.add(dish)
    db.session.commit()
    return dish


def make_event(user, title, date, guests=(), dishes=()):
    event = Event(user_id=user.id, title=title, date=date)
    db.session.add(event)
    db.session.flush()
    for guest in guests:
        db.session.add(EventGuest(event_id=event.id, guest_id=guest.id))
    for dish in dishes:
        db.session.add(EventDish(event_id=event.id, dish_id=dish.id))
    db.session.commit()
    return event


NOW = datetime(2024, 6, 15, 19, 0)

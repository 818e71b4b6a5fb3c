# Import all models here so they're registered with SQLAlchemy
from dinnerlog.models.user import User
from dinnerlog.models.guest import Guest
from dinnerlog.models.dish import Dish
from dinnerlog.models.event import Event
from dinnerlog.models.links import EventGuest, EventDish, GuestDishFavorite

__all__ = ['User', 'Guest', 'Dish', 'Event', 'EventGuest', 'EventDish', 'GuestDishFavorite']

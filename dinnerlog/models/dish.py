from datetime import datetime
from dinnerlog import db


class Dish(db.Model):
    """Recipe in the host's repertoire."""
    __tablename__ = 'dishes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('users.id'), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    ingredients = db.Column(db.JSON, default=list)
    instructions = db.Column(db.Text, nullable=True)
    prep_time = db.Column(db.Integer, nullable=True)  # minutes
    servings = db.Column(db.Integer, nullable=True)
    category = db.Column(db.String(50), nullable=True)  # appetizer, main, dessert, ...
    tags = db.Column(db.JSON, default=list)
    image_url = db.Column(db.String(300), nullable=True)
    pairs_with = db.Column(db.JSON, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    servings_at = db.relationship('EventDish', backref='dish', lazy='dynamic', cascade='all, delete-orphan')
    favorited_by = db.relationship('GuestDishFavorite', backref='dish', lazy='dynamic', cascade='all, delete-orphan')

    EDITABLE_FIELDS = ('title', 'description', 'ingredients', 'instructions', 'prep_time', 'servings',
                       'category', 'tags', 'image_url', 'pairs_with')

    def __repr__(self):
        return f'<Dish {self.title}>'

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'ingredients': self.ingredients or [],
            'instructions': self.instructions,
            'prep_time': self.prep_time,
            'servings': self.servings,
            'category': self.category,
            'tags': self.tags or [],
            'image_url': self.image_url,
            'pairs_with': self.pairs_with or [],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

# Import db from extensions to use the same instance
from src.extensions import db

# Import all models to ensure they are registered with SQLAlchemy
from src.models.callback import CallbackRecord
from src.models.route import RouteRecord

__all__ = ['db', 'CallbackRecord', 'RouteRecord']

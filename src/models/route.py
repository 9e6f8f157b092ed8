from src.models import db
from src.models.types import UTCDateTime
from src.utils.timezone import format_timestamp


class RouteRecord(db.Model):
    __tablename__ = 'routes'

    id = db.Column(db.String(64), primary_key=True)
    path = db.Column(db.String(500), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(UTCDateTime, nullable=False, index=True)
    updated_at = db.Column(UTCDateTime, nullable=True)

    def to_dict(self, tz):
        data = {
            'id': self.id,
            'path': self.path,
            'name': self.name,
            'description': self.description or '',
            'createdAt': format_timestamp(self.created_at, tz)
        }
        # updatedAt is absent until the first update
        if self.updated_at is not None:
            data['updatedAt'] = format_timestamp(self.updated_at, tz)
        return data

    def __repr__(self):
        return f'<RouteRecord {self.path} ({self.name})>'

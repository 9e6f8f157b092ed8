from datetime import datetime
import pytz
from src.models import db
from src.models.types import UTCDateTime, JSONDocument
from src.utils.timezone import format_timestamp, to_utc_naive


def utc_now():
    return to_utc_naive(datetime.now(pytz.UTC))


class CallbackRecord(db.Model):
    __tablename__ = 'callbacks'

    id = db.Column(db.String(64), primary_key=True)
    timestamp = db.Column(UTCDateTime, nullable=False, index=True)  # naive UTC
    route = db.Column(db.String(500), nullable=False, index=True)
    method = db.Column(db.String(10), nullable=False)
    headers = db.Column(JSONDocument, nullable=True)
    query_params = db.Column('query', JSONDocument, nullable=True)
    body = db.Column(JSONDocument, nullable=True)
    ip = db.Column(db.String(45), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self, tz):
        return {
            'id': self.id,
            'timestamp': format_timestamp(self.timestamp, tz),
            'route': self.route,
            'method': self.method,
            'headers': self.headers,
            'query': self.query_params,
            'body': self.body,
            'ip': self.ip
        }

    def __repr__(self):
        return f'<CallbackRecord {self.id} {self.method} {self.route}>'

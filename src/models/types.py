from sqlalchemy.dialects import mysql
from sqlalchemy.dialects.postgresql import JSONB
from src.extensions import db

# Naive UTC with microseconds on every engine (MySQL DATETIME defaults to seconds)
UTCDateTime = db.DateTime().with_variant(mysql.DATETIME(fsp=6), 'mysql')

# Native JSON on MySQL/PostgreSQL, JSON text on SQLite
JSONDocument = db.JSON().with_variant(JSONB(), 'postgresql')

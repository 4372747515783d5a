# /clinic/models/base.py
from datetime import datetime
from clinic.extensions import db


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def enum_column(enum_cls, name, **kwargs):
    """Column for a Python enum, persisted by value ('cancelled', not 'CANCELLED')."""
    return db.Column(
        db.Enum(enum_cls, name=name, values_callable=_enum_values, validate_strings=True),
        **kwargs
    )


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


def format_time(value):
    return value.strftime('%H:%M') if value else None


def format_date(value):
    return value.isoformat() if value else None


def format_amount(value):
    return f"{value:.2f}" if value is not None else None

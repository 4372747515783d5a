# /clinic/utils/lookups.py
from clinic.extensions import db
from clinic.utils.errors import NotFoundError


def get_or_404(model, entity_id, field=None):
    """Loads a row by primary key or raises ``NotFoundError`` naming the entity."""
    instance = db.session.get(model, entity_id) if entity_id is not None else None
    if instance is None:
        raise NotFoundError(model.__name__, entity_id, field=field)
    return instance

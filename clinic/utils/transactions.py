# /clinic/utils/transactions.py
from contextlib import contextmanager
from clinic.extensions import db


@contextmanager
def atomic():
    """Run a block as one unit of work: commit on success, roll back on any error."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

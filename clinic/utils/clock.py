# /clinic/utils/clock.py
"""Time source for business rules. Tests patch ``today``."""
from datetime import date


def today() -> date:
    return date.today()

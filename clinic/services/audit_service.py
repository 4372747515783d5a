# /clinic/services/audit_service.py
"""Append-only audit trail.

Entries are added to the caller's session and persist together with the
change they describe. The ``CLINIC_AUDIT`` log line is only emitted once
that transaction commits.
"""
from flask import current_app
from sqlalchemy import event
from sqlalchemy.orm import Session

from clinic.extensions import db
from clinic.models.directory_models import Staff
from clinic.models.system_models import AuditEntry, AuditAction
from clinic.utils.errors import NotFoundError

_PENDING_KEY = 'pending_audit_lines'


def resolve_actor(changed_by):
    """Returns the acting staff id, or None for system actions."""
    if changed_by is None:
        return None
    staff = db.session.get(Staff, changed_by)
    if not staff:
        raise NotFoundError('Staff', changed_by, field='changed_by')
    return staff.id


def record_audit(table_name, record_id, action, old_values=None, new_values=None, changed_by=None):
    entry = AuditEntry(
        table_name=table_name,
        record_id=record_id,
        action=action if isinstance(action, AuditAction) else AuditAction(action),
        old_values=old_values,
        new_values=new_values,
        changed_by=changed_by,
    )
    db.session.add(entry)
    db.session.info.setdefault(_PENDING_KEY, []).append(
        f"Table='{table_name}', RecordID='{record_id}', Action='{entry.action.value}', "
        f"ChangedBy='{changed_by}', Old={old_values}, New={new_values}"
    )
    return entry


def list_audit_entries(table_name=None, record_id=None):
    query = AuditEntry.query
    if table_name:
        query = query.filter_by(table_name=table_name)
    if record_id is not None:
        query = query.filter_by(record_id=record_id)
    return query.order_by(AuditEntry.changed_at, AuditEntry.id).all()


@event.listens_for(Session, 'after_commit')
def _flush_audit_lines(session):
    lines = session.info.pop(_PENDING_KEY, None)
    if not lines:
        return
    for line in lines:
        current_app.audit_logger.info(line)


@event.listens_for(Session, 'after_rollback')
def _discard_audit_lines(session):
    session.info.pop(_PENDING_KEY, None)

# /clinic/models/system_models.py
import enum
from datetime import datetime
from sqlalchemy import event
from clinic.extensions import db
from clinic.models.base import enum_column
from clinic.utils.errors import ImmutableRecordError


class AuditAction(enum.Enum):
    INSERT = 'INSERT'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'


class AuditEntry(db.Model):
    """Append-only audit trail of mutating actions on audited tables."""
    __tablename__ = 'audit_log'

    id = db.Column(db.Integer, primary_key=True)
    table_name = db.Column(db.String(50), nullable=False)
    record_id = db.Column(db.Integer, nullable=False)
    action = enum_column(AuditAction, 'audit_action', nullable=False)
    old_values = db.Column(db.JSON)
    new_values = db.Column(db.JSON)
    changed_by = db.Column(db.Integer, db.ForeignKey('staff.id', ondelete='SET NULL'))
    changed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('idx_audit_log_record', 'table_name', 'record_id', 'changed_at'),
    )

    actor = db.relationship('Staff', passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'table_name': self.table_name,
            'record_id': self.record_id,
            'action': self.action.value,
            'old_values': self.old_values,
            'new_values': self.new_values,
            'changed_by': self.changed_by,
            'changed_at': self.changed_at.isoformat() if self.changed_at else None,
        }


@event.listens_for(AuditEntry, 'before_update')
def _refuse_audit_update(mapper, connection, target):
    raise ImmutableRecordError("Audit entries cannot be modified",
                               entity='AuditEntry', value=target.id)


@event.listens_for(AuditEntry, 'before_delete')
def _refuse_audit_delete(mapper, connection, target):
    raise ImmutableRecordError("Audit entries cannot be deleted",
                               entity='AuditEntry', value=target.id)

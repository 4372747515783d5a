import enum
from datetime import datetime
from decimal import Decimal
from clinic.extensions import db
from clinic.models.base import TimestampMixin, enum_column, format_date, format_amount


class BillPaymentStatus(enum.Enum):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID = 'paid'
    INSURANCE_PROCESSING = 'insurance_processing'


class PaymentMethod(enum.Enum):
    CASH = 'cash'
    CREDIT_CARD = 'credit_card'
    DEBIT_CARD = 'debit_card'
    INSURANCE = 'insurance'
    BANK_TRANSFER = 'bank_transfer'


class PaymentStatus(enum.Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class Bill(TimestampMixin, db.Model):
    __tablename__ = 'billing'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False, index=True)
    # One bill per appointment
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id', ondelete='SET NULL'), unique=True)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    insurance_coverage = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal('0.00'))
    patient_responsibility = db.Column(db.Numeric(10, 2), nullable=False)
    payment_status = enum_column(BillPaymentStatus, 'bill_payment_status', nullable=False,
                                 default=BillPaymentStatus.PENDING, index=True)
    billing_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            'total_amount >= 0 AND insurance_coverage >= 0 AND patient_responsibility >= 0',
            name='chk_amounts_valid'
        ),
        db.CheckConstraint('due_date >= billing_date', name='chk_due_date_valid'),
    )

    patient = db.relationship('Patient', back_populates='bills')
    appointment = db.relationship('Appointment', back_populates='bills')
    payments = db.relationship('Payment', back_populates='bill', cascade='all, delete-orphan',
                               order_by='Payment.id')

    @property
    def amount_paid(self):
        return sum(
            (p.amount for p in self.payments if p.status == PaymentStatus.COMPLETED),
            Decimal('0.00')
        )

    @property
    def balance_due(self):
        return self.total_amount - self.amount_paid

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'appointment_id': self.appointment_id,
            'total_amount': format_amount(self.total_amount),
            'insurance_coverage': format_amount(self.insurance_coverage),
            'patient_responsibility': format_amount(self.patient_responsibility),
            'amount_paid': format_amount(self.amount_paid),
            'balance_due': format_amount(self.balance_due),
            'payment_status': self.payment_status.value,
            'billing_date': format_date(self.billing_date),
            'due_date': format_date(self.due_date),
        }


class Payment(TimestampMixin, db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    bill_id = db.Column(db.Integer, db.ForeignKey('billing.id', ondelete='CASCADE'), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = enum_column(PaymentMethod, 'payment_method', nullable=False)
    payment_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    transaction_id = db.Column(db.String(100))
    status = enum_column(PaymentStatus, 'payment_status', nullable=False, default=PaymentStatus.COMPLETED)

    __table_args__ = (
        db.CheckConstraint('amount > 0', name='chk_payment_amount_positive'),
    )

    bill = db.relationship('Bill', back_populates='payments')

    def to_dict(self):
        return {
            'id': self.id,
            'bill_id': self.bill_id,
            'amount': format_amount(self.amount),
            'payment_method': self.payment_method.value,
            'payment_date': self.payment_date.isoformat() if self.payment_date else None,
            'transaction_id': self.transaction_id,
            'status': self.status.value,
        }

# /clinic/services/billing_service.py
"""Bills derived from completed appointments, and payments against them."""
from datetime import timedelta
from decimal import Decimal

from flask import current_app

from clinic.extensions import db
from clinic.models.billing_models import (
    Bill, Payment, BillPaymentStatus, PaymentMethod, PaymentStatus
)
from clinic.models.system_models import AuditAction
from clinic.services.audit_service import record_audit, resolve_actor
from clinic.utils import clock
from clinic.utils.errors import ValidationError, InvalidTransitionError
from clinic.utils.lookups import get_or_404
from clinic.utils.transactions import atomic
from clinic.utils.validators import validate_amount, parse_enum, optional_text

CENTS = Decimal('0.01')


def price_appointment(appointment):
    """Returns (total, insurance_coverage, patient_responsibility) for a visit.

    The total is the consultation fee of the doctor's specialty, falling back
    to ``BILLING_DEFAULT_TOTAL``; insurance covers a configured share.
    """
    specialty = appointment.doctor.specialty
    total = specialty.consultation_fee if specialty and specialty.consultation_fee is not None \
        else current_app.config['BILLING_DEFAULT_TOTAL']
    total = Decimal(total).quantize(CENTS)
    rate = Decimal(current_app.config['BILLING_INSURANCE_COVERAGE_RATE'])
    insurance = (total * rate).quantize(CENTS)
    return total, insurance, total - insurance


def derive_bill(appointment, changed_by=None):
    """Creates the bill for a just-completed appointment.

    Runs inside the caller's transaction; any failure here rolls back the
    status change that triggered it.
    """
    total, insurance, patient_due = price_appointment(appointment)
    billing_date = clock.today()
    bill = Bill(
        patient_id=appointment.patient_id,
        appointment_id=appointment.id,
        total_amount=total,
        insurance_coverage=insurance,
        patient_responsibility=patient_due,
        payment_status=BillPaymentStatus.PENDING,
        billing_date=billing_date,
        due_date=billing_date + timedelta(days=current_app.config['BILLING_DUE_DAYS']),
    )
    db.session.add(bill)
    db.session.flush()
    record_audit('billing', bill.id, AuditAction.INSERT, new_values=bill.to_dict(), changed_by=changed_by)
    current_app.logger.info(f"Bill {bill.id} derived for appointment {appointment.id}: total {total}")
    return bill


def get_bill(bill_id):
    return get_or_404(Bill, bill_id)


def list_patient_bills(patient_id):
    return Bill.query.filter_by(patient_id=patient_id).order_by(Bill.billing_date, Bill.id).all()


def _refresh_payment_status(bill):
    paid = bill.amount_paid
    if paid >= bill.total_amount:
        bill.payment_status = BillPaymentStatus.PAID
    elif paid > 0:
        bill.payment_status = BillPaymentStatus.PARTIAL
    elif bill.payment_status != BillPaymentStatus.INSURANCE_PROCESSING:
        bill.payment_status = BillPaymentStatus.PENDING


def record_payment(bill_id, amount, payment_method, transaction_id=None,
                   status=PaymentStatus.COMPLETED, changed_by=None):
    bill = get_or_404(Bill, bill_id, field='bill_id')
    amount = validate_amount(amount, 'amount', entity='Payment', allow_zero=False)
    method = parse_enum(PaymentMethod, payment_method, 'payment_method', entity='Payment')
    status = parse_enum(PaymentStatus, status, 'status', entity='Payment')
    if status == PaymentStatus.REFUNDED:
        raise ValidationError("A payment cannot be recorded as refunded",
                              entity='Payment', field='status', value=status.value)
    if amount > bill.balance_due:
        raise ValidationError("Payment exceeds the outstanding balance",
                              entity='Payment', field='amount', value=amount)
    actor_id = resolve_actor(changed_by)

    old_status = bill.payment_status
    with atomic():
        payment = Payment(
            bill=bill,
            amount=amount,
            payment_method=method,
            transaction_id=optional_text(transaction_id, 'transaction_id', max_length=100),
            status=status,
        )
        db.session.add(payment)
        _refresh_payment_status(bill)
        db.session.flush()
        record_audit('payments', payment.id, AuditAction.INSERT,
                     new_values=payment.to_dict(), changed_by=actor_id)
        if bill.payment_status != old_status:
            record_audit('billing', bill.id, AuditAction.UPDATE,
                         old_values={'payment_status': old_status.value},
                         new_values={'payment_status': bill.payment_status.value},
                         changed_by=actor_id)

    current_app.logger.info(f"Payment {payment.id} of {amount} recorded against bill {bill.id}")
    return payment


def refund_payment(payment_id, changed_by=None):
    payment = get_or_404(Payment, payment_id)
    if payment.status != PaymentStatus.COMPLETED:
        raise InvalidTransitionError("Only completed payments can be refunded",
                                     entity='Payment', field='status', value=payment.status.value)
    actor_id = resolve_actor(changed_by)
    bill = payment.bill
    old_bill_status = bill.payment_status

    with atomic():
        payment.status = PaymentStatus.REFUNDED
        _refresh_payment_status(bill)
        record_audit('payments', payment.id, AuditAction.UPDATE,
                     old_values={'status': PaymentStatus.COMPLETED.value},
                     new_values={'status': PaymentStatus.REFUNDED.value},
                     changed_by=actor_id)
        if bill.payment_status != old_bill_status:
            record_audit('billing', bill.id, AuditAction.UPDATE,
                         old_values={'payment_status': old_bill_status.value},
                         new_values={'payment_status': bill.payment_status.value},
                         changed_by=actor_id)

    current_app.logger.info(f"Payment {payment.id} refunded")
    return payment


def mark_insurance_processing(bill_id, changed_by=None):
    bill = get_or_404(Bill, bill_id)
    if bill.payment_status == BillPaymentStatus.PAID:
        raise InvalidTransitionError("Bill is already paid",
                                     entity='Bill', field='payment_status', value=bill.payment_status.value)
    if bill.payment_status == BillPaymentStatus.INSURANCE_PROCESSING:
        return bill
    actor_id = resolve_actor(changed_by)
    old_status = bill.payment_status

    with atomic():
        bill.payment_status = BillPaymentStatus.INSURANCE_PROCESSING
        record_audit('billing', bill.id, AuditAction.UPDATE,
                     old_values={'payment_status': old_status.value},
                     new_values={'payment_status': bill.payment_status.value},
                     changed_by=actor_id)
    return bill

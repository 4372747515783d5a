from flask import jsonify
from clinic.api.controllers import get_json_body, missing_fields_response
from clinic.services import billing_service
from clinic.utils.decorators import current_actor_id


def get_bill(bill_id):
    bill = billing_service.get_bill(bill_id)
    return jsonify({'bill': bill.to_dict(), 'payments': [p.to_dict() for p in bill.payments]}), 200


def record_payment(bill_id):
    data = get_json_body()
    missing = missing_fields_response(data, ['amount', 'payment_method'])
    if missing:
        return missing

    payment = billing_service.record_payment(
        bill_id,
        amount=data['amount'],
        payment_method=data['payment_method'],
        transaction_id=data.get('transaction_id'),
        status=data.get('status', 'completed'),
        changed_by=current_actor_id(),
    )
    return jsonify({'message': 'Payment recorded', 'payment': payment.to_dict(),
                    'bill': payment.bill.to_dict()}), 201


def refund_payment(payment_id):
    payment = billing_service.refund_payment(payment_id, changed_by=current_actor_id())
    return jsonify({'message': 'Payment refunded', 'payment': payment.to_dict(),
                    'bill': payment.bill.to_dict()}), 200


def mark_insurance_processing(bill_id):
    bill = billing_service.mark_insurance_processing(bill_id, changed_by=current_actor_id())
    return jsonify({'bill': bill.to_dict()}), 200

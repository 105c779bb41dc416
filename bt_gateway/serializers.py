"""Reduce braintree SDK objects to the JSON shapes the browser client reads.

SDK resources only carry the attributes present in the gateway response, so
every lookup goes through getattr with a None default.
"""


def _iso(value):
    return value.isoformat() if value is not None else None


def _money(value):
    return str(value) if value is not None else None


def serialize_payment_method(pm) -> dict:
    return {
        "token": getattr(pm, "token", None),
        "type": pm.__class__.__name__,
        "default": getattr(pm, "default", None),
        "imageUrl": getattr(pm, "image_url", None),
        "cardType": getattr(pm, "card_type", None),
        "last4": getattr(pm, "last_4", None),
        "expirationMonth": getattr(pm, "expiration_month", None),
        "expirationYear": getattr(pm, "expiration_year", None),
        "email": getattr(pm, "email", None),
        "createdAt": _iso(getattr(pm, "created_at", None)),
    }


def serialize_customer(customer) -> dict:
    return {
        "id": customer.id,
        "firstName": getattr(customer, "first_name", None),
        "lastName": getattr(customer, "last_name", None),
        "email": getattr(customer, "email", None),
        "phone": getattr(customer, "phone", None),
        "createdAt": _iso(getattr(customer, "created_at", None)),
        "paymentMethods": [
            serialize_payment_method(pm)
            for pm in (getattr(customer, "payment_methods", None) or [])
        ],
    }


def _card_details(tx):
    card = getattr(tx, "credit_card_details", None)
    if card is None or getattr(card, "last_4", None) is None:
        return None
    return card


def serialize_transaction(tx) -> dict:
    card = _card_details(tx)
    return {
        "id": tx.id,
        "amount": _money(getattr(tx, "amount", None)),
        "status": getattr(tx, "status", None),
        "type": getattr(tx, "type", None),
        "createdAt": _iso(getattr(tx, "created_at", None)),
        "updatedAt": _iso(getattr(tx, "updated_at", None)),
        "cardType": getattr(card, "card_type", None) if card else None,
        "last4": getattr(card, "last_4", None) if card else None,
    }


def serialize_transaction_detail(tx) -> dict:
    """Single-transaction view: the list shape plus a nested card summary."""
    body = serialize_transaction(tx)
    customer = getattr(tx, "customer_details", None)
    card = _card_details(tx)
    body.update({
        "customerId": getattr(customer, "id", None) if customer else None,
        "orderId": getattr(tx, "order_id", None),
        "creditCard": {
            "cardType": getattr(card, "card_type", None),
            "last4": getattr(card, "last_4", None),
            "expirationMonth": getattr(card, "expiration_month", None),
            "expirationYear": getattr(card, "expiration_year", None),
        } if card else None,
    })
    return body


def serialize_result_transaction(tx) -> dict:
    """Short shape returned after sale, refund and void."""
    return {
        "id": tx.id,
        "status": getattr(tx, "status", None),
        "amount": _money(getattr(tx, "amount", None)),
    }


def _serialize_modification(mod) -> dict:
    return {
        "id": getattr(mod, "id", None),
        "name": getattr(mod, "name", None),
        "amount": _money(getattr(mod, "amount", None)),
        "quantity": getattr(mod, "quantity", None),
        "numberOfBillingCycles": getattr(mod, "number_of_billing_cycles", None),
        "neverExpires": getattr(mod, "never_expires", None),
    }


def serialize_subscription(sub, include_extras: bool = True) -> dict:
    body = {
        "id": sub.id,
        "status": getattr(sub, "status", None),
        "planId": getattr(sub, "plan_id", None),
        "price": _money(getattr(sub, "price", None)),
        "nextBillingDate": _iso(getattr(sub, "next_billing_date", None)),
        "createdAt": _iso(getattr(sub, "created_at", None)),
    }
    if include_extras:
        body["addOns"] = [_serialize_modification(m) for m in (getattr(sub, "add_ons", None) or [])]
        body["discounts"] = [_serialize_modification(m) for m in (getattr(sub, "discounts", None) or [])]
    return body


def serialize_validation_errors(result) -> list:
    errors = getattr(result, "errors", None)
    if errors is None:
        return []
    return [
        {
            "attribute": getattr(error, "attribute", None),
            "code": getattr(error, "code", None),
            "message": getattr(error, "message", None),
        }
        for error in (getattr(errors, "deep_errors", None) or [])
    ]

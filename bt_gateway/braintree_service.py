import braintree

from bt_gateway.config import Settings


def create_gateway(settings: Settings):
    environment = (
        braintree.Environment.Production
        if settings.is_production
        else braintree.Environment.Sandbox
    )
    return braintree.BraintreeGateway(
        braintree.Configuration(
            environment=environment,
            merchant_id=settings.merchant_id,
            public_key=settings.public_key,
            private_key=settings.private_key,
        )
    )


def generate_client_token(gateway, customer_id: str = None):
    return gateway.client_token.generate(
        {"customer_id": customer_id} if customer_id else {}
    )


def find_customer(gateway, customer_id: str):
    return gateway.customer.find(customer_id)


def list_customers(gateway):
    # Drains every page before returning; iteration errors propagate
    return list(gateway.customer.all())


def create_customer(gateway, first_name=None, last_name=None, email=None,
                    phone=None, payment_method_nonce=None):
    params = {
        "first_name": first_name,
        "last_name": last_name,
        "email": email,
        "phone": phone,
        "payment_method_nonce": payment_method_nonce,
    }
    return gateway.customer.create(
        {key: value for key, value in params.items() if value is not None}
    )


def search_customer_transactions(gateway, customer_id: str):
    collection = gateway.transaction.search(
        braintree.TransactionSearch.customer_id == customer_id
    )
    transactions = list(collection)
    # list.sort is stable, so equal timestamps keep the order the gateway sent
    transactions.sort(key=lambda tx: tx.created_at, reverse=True)
    return transactions


def customer_subscriptions(customer):
    subscriptions = []
    for payment_method in getattr(customer, "payment_methods", None) or []:
        subscriptions.extend(getattr(payment_method, "subscriptions", None) or [])
    return subscriptions


def find_transaction(gateway, transaction_id: str):
    return gateway.transaction.find(transaction_id)


def sale(gateway, amount, payment_method_nonce: str, device_data: str = None):
    params = {
        "amount": amount,
        "payment_method_nonce": payment_method_nonce,
        "options": {"submit_for_settlement": True},
    }
    if device_data:
        params["device_data"] = device_data
    return gateway.transaction.sale(params)


def refund(gateway, transaction_id: str, amount=None):
    if amount:
        return gateway.transaction.refund(transaction_id, amount)
    return gateway.transaction.refund(transaction_id)


def void(gateway, transaction_id: str):
    return gateway.transaction.void(transaction_id)

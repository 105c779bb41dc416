from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import braintree
import pytest
from braintree.exceptions import ServerError

from bt_gateway import braintree_service
from bt_gateway.config import Settings
from bt_gateway.serializers import (
    serialize_customer,
    serialize_subscription,
    serialize_transaction,
    serialize_validation_errors,
)


def test_create_gateway_sandbox():
    gateway = braintree_service.create_gateway(
        Settings(merchant_id="m", public_key="pub", private_key="priv")
    )

    assert isinstance(gateway, braintree.BraintreeGateway)
    assert gateway.config.environment == braintree.Environment.Sandbox
    assert gateway.config.merchant_id == "m"


def test_create_gateway_production():
    gateway = braintree_service.create_gateway(
        Settings(environment="production", merchant_id="m", public_key="pub", private_key="priv")
    )

    assert gateway.config.environment == braintree.Environment.Production


def test_create_customer_drops_missing_fields(mocker):
    gateway = mocker.Mock()

    braintree_service.create_customer(gateway, first_name="Ada", phone="555-0100")

    gateway.customer.create.assert_called_once_with({"first_name": "Ada", "phone": "555-0100"})


def test_search_drains_collection_before_sorting(mocker):
    gateway = mocker.Mock()
    gateway.transaction.search.return_value = iter([
        SimpleNamespace(id="a", created_at=datetime(2024, 1, 1)),
        SimpleNamespace(id="b", created_at=datetime(2024, 2, 1)),
    ])

    transactions = braintree_service.search_customer_transactions(gateway, "abc123")

    assert [tx.id for tx in transactions] == ["b", "a"]
    gateway.transaction.search.assert_called_once()


def test_search_propagates_stream_error(mocker):
    def stream():
        yield SimpleNamespace(id="a", created_at=datetime(2024, 1, 1))
        raise ServerError()

    gateway = mocker.Mock()
    gateway.transaction.search.return_value = stream()

    with pytest.raises(ServerError):
        braintree_service.search_customer_transactions(gateway, "abc123")


def test_customer_subscriptions_flattens_in_payment_method_order():
    customer = SimpleNamespace(payment_methods=[
        SimpleNamespace(subscriptions=["s1"]),
        SimpleNamespace(subscriptions=None),
        SimpleNamespace(),
        SimpleNamespace(subscriptions=["s2", "s3"]),
    ])

    assert braintree_service.customer_subscriptions(customer) == ["s1", "s2", "s3"]


def test_sale_always_submits_for_settlement(mocker):
    gateway = mocker.Mock()

    braintree_service.sale(gateway, "5.00", "nonce")

    gateway.transaction.sale.assert_called_once_with({
        "amount": "5.00",
        "payment_method_nonce": "nonce",
        "options": {"submit_for_settlement": True},
    })


def test_serialize_customer_without_payment_methods():
    body = serialize_customer(SimpleNamespace(id="c1"))

    assert body == {
        "id": "c1",
        "firstName": None,
        "lastName": None,
        "email": None,
        "phone": None,
        "createdAt": None,
        "paymentMethods": [],
    }


def test_serialize_transaction_with_empty_card_details():
    # PayPal transactions still carry a credit_card element with no fields set
    tx = SimpleNamespace(id="t1", amount=Decimal("1.00"), credit_card_details=SimpleNamespace(last_4=None))

    body = serialize_transaction(tx)

    assert body["cardType"] is None
    assert body["last4"] is None
    assert body["amount"] == "1.00"


def test_serialize_subscription_defaults_extras_to_empty():
    body = serialize_subscription(SimpleNamespace(id="s1", price=Decimal("9.99")))

    assert body["addOns"] == []
    assert body["discounts"] == []
    assert body["price"] == "9.99"


def test_serialize_validation_errors_without_errors():
    assert serialize_validation_errors(SimpleNamespace(errors=None)) == []

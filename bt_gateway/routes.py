import logging
from decimal import Decimal
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from bt_gateway.braintree_service import (
    create_customer,
    customer_subscriptions,
    find_customer,
    find_transaction,
    generate_client_token,
    list_customers,
    refund,
    sale,
    search_customer_transactions,
    void,
)
from bt_gateway.config import Settings
from bt_gateway.errors import ErrorKind, GatewayFacadeError, translate_errors
from bt_gateway.serializers import (
    serialize_customer,
    serialize_result_transaction,
    serialize_subscription,
    serialize_transaction,
    serialize_transaction_detail,
    serialize_validation_errors,
)

logger = logging.getLogger(__name__)

# Always mounted
router = APIRouter(prefix="/api")
# Mounted when PAYMENT_ROUTES is enabled
payments_router = APIRouter(prefix="/api")

# Strings pass through untouched; JSON numbers are parsed exactly
Amount = Union[StrictStr, Decimal]


def get_gateway(request: Request):
    return request.app.state.gateway


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CustomerRequest(CamelModel):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_method_nonce: Optional[str] = Field(None, alias="paymentMethodNonce")


class AmountRequest(CamelModel):
    amount: Optional[Amount] = None

    @field_validator("amount", mode="before")
    @classmethod
    def reject_bool(cls, value):
        if isinstance(value, bool):
            raise ValueError("amount must be a string or a number")
        return value


class CheckoutRequest(AmountRequest):
    payment_method_nonce: Optional[str] = Field(None, alias="paymentMethodNonce")
    device_data: Optional[str] = Field(None, alias="deviceData")


class RefundRequest(AmountRequest):
    pass


def _amount(value):
    # Empty strings and numeric zero mean "no amount"
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return format(value, "f") if value else None
    return value


def _rejected(result):
    """Raise the gateway's own message and errors when a call did not succeed."""
    if not result.is_success:
        logger.warning("Gateway rejected request: %s", result.message)
        raise GatewayFacadeError.invalid(
            result.message, serialize_validation_errors(result)
        )


@router.get("/config")
def get_config(settings: Settings = Depends(get_settings)):
    return {"success": True, "customerId": settings.customer_id}


@router.get("/client-token")
def client_token(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    gateway=Depends(get_gateway),
):
    with translate_errors("Failed to generate client token"):
        token = generate_client_token(gateway, customer_id)
    return {"success": True, "clientToken": token}


@router.get("/customer/{customer_id}")
def get_customer(customer_id: str, gateway=Depends(get_gateway)):
    with translate_errors("Customer not found", ErrorKind.NOT_FOUND):
        customer = find_customer(gateway, customer_id)
    return {"success": True, "customer": serialize_customer(customer)}


@router.get("/customer/{customer_id}/transactions")
def get_customer_transactions(customer_id: str, gateway=Depends(get_gateway)):
    with translate_errors("Failed to fetch transactions"):
        transactions = search_customer_transactions(gateway, customer_id)
    return {
        "success": True,
        "transactions": [serialize_transaction(tx) for tx in transactions],
        "count": len(transactions),
    }


@router.get("/customer/{customer_id}/subscriptions")
def get_customer_subscriptions(
    customer_id: str,
    gateway=Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    with translate_errors("Failed to fetch subscriptions"):
        customer = find_customer(gateway, customer_id)
        if not getattr(customer, "payment_methods", None):
            return {"success": True, "subscriptions": [], "count": 0}
        subscriptions = customer_subscriptions(customer)
        body = [
            serialize_subscription(sub, include_extras=settings.subscription_extras)
            for sub in subscriptions
        ]
    return {"success": True, "subscriptions": body, "count": len(body)}


@router.post("/refund/{transaction_id}")
def refund_transaction(
    transaction_id: str,
    body: Optional[RefundRequest] = None,
    gateway=Depends(get_gateway),
):
    amount = _amount(body.amount) if body else None
    with translate_errors("Failed to process refund"):
        result = refund(gateway, transaction_id, amount)
        _rejected(result)
    logger.info("Refunded transaction %s (amount=%s)", transaction_id, amount or "full")
    return {"success": True, "transaction": serialize_result_transaction(result.transaction)}


@payments_router.get("/test-connection")
def check_connection(
    gateway=Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    try:
        generate_client_token(gateway)
    except Exception as exc:
        logger.exception("Braintree connection test failed")
        raise GatewayFacadeError.upstream(
            "Failed to connect to Braintree",
            details={"message": str(exc), "type": exc.__class__.__name__},
        ) from exc
    return {
        "success": True,
        "message": "Successfully connected to Braintree",
        "environment": settings.environment,
    }


@payments_router.get("/customers")
def get_customers(gateway=Depends(get_gateway)):
    with translate_errors("Failed to fetch customers"):
        customers = list_customers(gateway)
    return {
        "success": True,
        "customers": [serialize_customer(c) for c in customers],
        "count": len(customers),
    }


@payments_router.post("/customer")
def create_customer_api(request: CustomerRequest, gateway=Depends(get_gateway)):
    with translate_errors("Failed to create customer"):
        result = create_customer(
            gateway,
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            phone=request.phone,
            payment_method_nonce=request.payment_method_nonce,
        )
        _rejected(result)
    logger.info("Created customer %s", result.customer.id)
    return {"success": True, "customer": serialize_customer(result.customer)}


@payments_router.get("/transaction/{transaction_id}")
def get_transaction(transaction_id: str, gateway=Depends(get_gateway)):
    with translate_errors("Transaction not found", ErrorKind.NOT_FOUND):
        transaction = find_transaction(gateway, transaction_id)
    return {"success": True, "transaction": serialize_transaction_detail(transaction)}


@payments_router.post("/checkout")
def checkout(body: Optional[CheckoutRequest] = None, gateway=Depends(get_gateway)):
    nonce = body.payment_method_nonce if body else None
    amount = _amount(body.amount) if body else None
    if not nonce or not amount:
        raise GatewayFacadeError.invalid("Payment method nonce and amount are required")

    with translate_errors("Failed to process payment"):
        result = sale(gateway, amount, nonce, body.device_data)
        _rejected(result)
    logger.info("Sale %s submitted for settlement", result.transaction.id)
    return {"success": True, "transaction": serialize_result_transaction(result.transaction)}


@payments_router.post("/void/{transaction_id}")
def void_transaction(transaction_id: str, gateway=Depends(get_gateway)):
    with translate_errors("Failed to void transaction"):
        result = void(gateway, transaction_id)
        _rejected(result)
    logger.info("Voided transaction %s", transaction_id)
    return {"success": True, "transaction": serialize_result_transaction(result.transaction)}

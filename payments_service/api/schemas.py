"""
Pydantic schemas for API responses.

Payment records are open-ended (every field of the create payload is kept),
so they travel as plain dicts inside a ``data`` envelope.
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = Field(..., description="Always 'ok' while the process serves requests")
    service: str = Field(..., description="Service name")


class MessageResponse(BaseModel):
    """Error or informational message."""

    message: str


class OrdersMeta(BaseModel):
    total: int = Field(..., description="Number of orders returned")


class OrdersResponse(BaseModel):
    data: List[Dict[str, Any]]
    meta: OrdersMeta


class PaymentResponse(BaseModel):
    """Single payment envelope."""

    data: Dict[str, Any] = Field(..., description="Payment record")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "data": {
                        "id": "pay_1736157600000",
                        "orderId": "ord_1001",
                        "amount": 149.9,
                    }
                }
            ]
        }
    }

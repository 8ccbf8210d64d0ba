"""Response shapes for the premium upgrade flow."""

from pydantic import Field

from mindwell.schemas.common import CamelModel


class SubscriptionResponse(CamelModel):
    client_secret: str = Field(
        description="Payment intent client secret, handed to the payment form"
    )


class WebhookAck(CamelModel):
    received: bool = True

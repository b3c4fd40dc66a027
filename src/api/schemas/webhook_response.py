"""Response schemas for the Webhook API"""

from pydantic import BaseModel
from src.app.use_cases.webhook.dtos import WebhookOutcomeDTO


class WebhookAckResponseSchema(BaseModel):
    """
    Acknowledgement returned to the provider

    Any 200 answer tells the provider to stop retrying the delivery.
    """

    data: WebhookOutcomeDTO

    class Config:
        json_schema_extra = {
            "example": {
                "data": {
                    "status": "success",
                    "message": "Webhook processed",
                    "ref_id": "T1",
                    "transaction_status": "Sukses",
                    "notified": True
                }
            }
        }

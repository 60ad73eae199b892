"""Payment schemas"""

from pydantic import BaseModel


class CheckoutRequest(BaseModel):
    course_id: int


class CheckoutResponse(BaseModel):
    url: str


class VerifyPaymentResponse(BaseModel):
    message: str
    course_id: int
    enrolled: bool
    already_processed: bool

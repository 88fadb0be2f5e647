from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Annotated, Optional
from app.utils.enums import CheckoutMode, SubscriptionTier


def _check_email(value: str) -> str:
    # Validate only; Stripe's email filter is case-sensitive so the caller's spelling is kept
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(str(e)) from e
    return value


CallerEmail = Annotated[str, AfterValidator(_check_email)]


class CamelModel(BaseModel):
    # Wire format is camelCase, attributes stay snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckoutSessionCreate(CamelModel):
    price_id: str
    customer_email: CallerEmail
    mode: Optional[CheckoutMode] = None  # default handled in route


class CheckoutSessionResponse(BaseModel):
    id: str


class PortalSessionCreate(CamelModel):
    customer_email: CallerEmail


class PortalSessionResponse(BaseModel):
    url: str


class SubscriptionStatusResponse(CamelModel):
    tier: SubscriptionTier
    active: bool
    status: Optional[str] = None
    current_period_end: Optional[int] = None
    cancel_at_period_end: Optional[bool] = None

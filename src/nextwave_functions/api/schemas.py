from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerateBlogResponse(BaseModel):
    content: str


class ErrorResponse(BaseModel):
    error: str


class ContactRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    message: str = Field(..., min_length=1)

    @field_validator("name", "email", "message", mode="before")
    @classmethod
    def _strip(cls, value):
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("name")
    @classmethod
    def _single_line(cls, value: str) -> str:
        # Used in the Subject header.
        if "\n" in value or "\r" in value:
            raise ValueError("name must be a single line")
        return value

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        local, _, domain = value.partition("@")
        if not local or not domain or any(char.isspace() for char in value):
            raise ValueError("invalid email address")
        return value


class ContactResponse(BaseModel):
    success: bool = True


class CheckoutRequest(BaseModel):
    plan: str = Field(..., min_length=1, description="Pricing plan id: starter, pro or infinite.")

    @field_validator("plan", mode="before")
    @classmethod
    def _normalize(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")

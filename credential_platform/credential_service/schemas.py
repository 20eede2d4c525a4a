from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_PATTERN = r"^([\w\.\-]+)@([\w\-]+)((\.(\w){2,3})+)$"


def _check_encodable(value: str) -> str:
    # Emails are stored and logged as UTF-8
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError("email must be valid unicode text") from e
    return value


class RegisterRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=8, max_length=20)

    @field_validator("email")
    @classmethod
    def email_must_encode(cls, value: str) -> str:
        return _check_encodable(value)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def email_must_encode(cls, value: str) -> str:
        return _check_encodable(value)


class AccountResponse(BaseModel):
    id: int
    email: str

    model_config = ConfigDict(from_attributes=True)


class AccountPage(BaseModel):
    page: int
    count: int
    accounts: list[AccountResponse]

from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Address(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class VerificationRequest(BaseModel):
    """Identity fields shared by every product request.

    Fields are optional at parse time; presence is checked by
    ``missing_fields`` so the caller gets MISSING_REQUIRED_FIELDS rather
    than a schema error.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    required_fields: ClassVar[tuple[str, ...]] = ("first_name", "last_name")

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    email: str | None = None

    def missing_fields(self) -> list[str]:
        return [name for name in self.required_fields if not getattr(self, name)]

    @classmethod
    def describe_required(cls) -> str:
        names = [to_camel(name) for name in cls.required_fields]
        if len(names) <= 2:
            return " and ".join(names)
        return ", ".join(names[:-1]) + f", and {names[-1]}"


class CrossCheckRequest(VerificationRequest):
    required_fields: ClassVar[tuple[str, ...]] = ("first_name", "last_name", "phone")

    ip_address: str | None = None
    address: Address | None = None


class DOBRequest(VerificationRequest):
    required_fields: ClassVar[tuple[str, ...]] = (
        "first_name",
        "last_name",
        "date_of_birth",
    )

    date_of_birth: str | None = None


class SSNRequest(VerificationRequest):
    required_fields: ClassVar[tuple[str, ...]] = (
        "first_name",
        "last_name",
        "ssn",
        "phone",
    )

    ssn: str | None = None
    date_of_birth: str | None = None


class InviteRequest(VerificationRequest):
    required_fields: ClassVar[tuple[str, ...]] = ("first_name", "last_name", "phone")

    birth_date: str | None = None


class VerificationSuccess(BaseModel):
    kind: Literal["ok"] = "ok"
    body: dict[str, Any]


class VerificationFailure(BaseModel):
    kind: Literal["error"] = "error"
    status_code: int
    error: str
    message: str
    code: str
    details: Any = None

    def to_dict(self) -> dict[str, Any]:
        body = {"error": self.error, "message": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


UpstreamResult = Annotated[
    Union[VerificationSuccess, VerificationFailure], Field(discriminator="kind")
]


class ServiceStatus(BaseModel):
    service: str
    status: str = "active"
    configured: bool
    timestamp: str

"""The Vouched products this service proxies and how each request is shaped."""

from dataclasses import dataclass
from typing import Any, Callable

from idvdemo.core.masking import NOT_PROVIDED, mask_phone, mask_ssn
from idvdemo.schemas.verification import (
    CrossCheckRequest,
    DOBRequest,
    InviteRequest,
    SSNRequest,
    VerificationRequest,
)
from idvdemo.services.formatting import format_date_of_birth, format_phone, format_ssn


@dataclass(frozen=True)
class Product:
    label: str
    service: str
    path: str
    key_setting: str
    request_model: type[VerificationRequest]
    summarize: Callable[[Any], dict[str, Any]]
    # None when the payload depends on the incoming request
    build_payload: Callable[[Any], dict[str, Any]] | None = None


def _crosscheck_payload(req: CrossCheckRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": format_phone(req.phone),
    }
    if req.email:
        payload["email"] = req.email
    if req.ip_address:
        payload["ipAddress"] = req.ip_address
    if req.address:
        payload["address"] = req.address.model_dump(by_alias=True, exclude_none=True)
    return payload


def _crosscheck_summary(req: CrossCheckRequest) -> dict[str, Any]:
    return {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": mask_phone(req.phone),
        "email": req.email or NOT_PROVIDED,
        "ipAddress": req.ip_address or NOT_PROVIDED,
        "address": "provided" if req.address else NOT_PROVIDED,
    }


def _dob_payload(req: DOBRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "dob": format_date_of_birth(req.date_of_birth),
    }
    if req.phone:
        payload["phone"] = format_phone(req.phone)
    return payload


def _dob_summary(req: DOBRequest) -> dict[str, Any]:
    return {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "dateOfBirth": req.date_of_birth,
        "phone": mask_phone(req.phone),
        "email": req.email or NOT_PROVIDED,
    }


def _ssn_payload(req: SSNRequest) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ssn": format_ssn(req.ssn),
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": format_phone(req.phone),
    }
    if req.date_of_birth:
        payload["dob"] = format_date_of_birth(req.date_of_birth)
    return payload


def _ssn_summary(req: SSNRequest) -> dict[str, Any]:
    return {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": mask_phone(req.phone),
        "ssn": mask_ssn(req.ssn),
        "dateOfBirth": req.date_of_birth or NOT_PROVIDED,
    }


def invite_payload(req: InviteRequest, callback_url: str) -> dict[str, Any]:
    parameters: dict[str, Any] = {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": format_phone(req.phone),
        "callbackURL": callback_url,
    }
    if req.email:
        parameters["email"] = req.email
    if req.birth_date:
        parameters["birthDate"] = req.birth_date
    return {"parameters": parameters}


def _invite_summary(req: InviteRequest) -> dict[str, Any]:
    return {
        "firstName": req.first_name,
        "lastName": req.last_name,
        "phone": mask_phone(req.phone),
    }


CROSSCHECK = Product(
    label="CrossCheck",
    service="CrossCheck Verification API",
    path="/api/identity/crosscheck",
    key_setting="vouched_private_api_key",
    request_model=CrossCheckRequest,
    build_payload=_crosscheck_payload,
    summarize=_crosscheck_summary,
)

DOB = Product(
    label="DOB",
    service="DOB Verification API",
    path="/api/dob/verify",
    key_setting="vouched_private_api_key",
    request_model=DOBRequest,
    build_payload=_dob_payload,
    summarize=_dob_summary,
)

SSN = Product(
    label="SSN",
    service="SSN Verification API",
    path="/api/private-ssn/verify",
    key_setting="vouched_ssn_private_api_key",
    request_model=SSNRequest,
    build_payload=_ssn_payload,
    summarize=_ssn_summary,
)

INVITE = Product(
    label="IAL2 Invite",
    service="IAL2 Send Invite API",
    path="/api/invites",
    key_setting="vouched_private_api_key",
    request_model=InviteRequest,
    summarize=_invite_summary,
)

PRODUCTS = {"crosscheck": CROSSCHECK, "dob": DOB, "ssn": SSN, "invite": INVITE}

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Account creation requests accepted by the workflow.
"""

from dataclasses import dataclass

from schema import Schema, And, Regex, SchemaError

from govcloud_bridge.shared.environment import AWS_ACCOUNT_ID_REGEX_STR
from govcloud_bridge.shared.errors import ValidationError

CREATE_MODE = "create"
JOIN_EXISTING_MODE = "join-existing"
EMAIL_REGEX_STR = r"\A[^\s@]+@[^\s@]+\.[^\s@]+\Z"

ACCOUNT_NAME = And(
    str,
    lambda name: 1 <= len(name) <= 50,
    error="accountName must be between 1 and 50 characters",
)
ACCOUNT_ID = And(
    str,
    Regex(AWS_ACCOUNT_ID_REGEX_STR),
    error="Account ids must be 12 digit strings",
)

CREATE_SCHEMA = Schema({
    "mode": CREATE_MODE,
    "accountName": ACCOUNT_NAME,
    "email": And(str, Regex(EMAIL_REGEX_STR), error="email must be a valid address"),
})

JOIN_EXISTING_SCHEMA = Schema({
    "mode": JOIN_EXISTING_MODE,
    "govCloudAccountId": ACCOUNT_ID,
    "commercialAccountId": ACCOUNT_ID,
    "accountName": ACCOUNT_NAME,
})


@dataclass(frozen=True)
class CreateAccountRequest:
    account_name: str
    email: str
    mode: str = CREATE_MODE

    def to_input(self):
        return {
            "mode": self.mode,
            "accountName": self.account_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class JoinExistingAccountRequest:
    gov_cloud_account_id: str
    commercial_account_id: str
    account_name: str
    mode: str = JOIN_EXISTING_MODE

    def to_input(self):
        return {
            "mode": self.mode,
            "govCloudAccountId": self.gov_cloud_account_id,
            "commercialAccountId": self.commercial_account_id,
            "accountName": self.account_name,
        }


def parse_request(body):
    """
    Validates a submitted request body.

    Returns:
        CreateAccountRequest|JoinExistingAccountRequest

    Raises:
        ValidationError: When the body matches neither request shape.
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    mode = body.get("mode")
    schema = {
        CREATE_MODE: CREATE_SCHEMA,
        JOIN_EXISTING_MODE: JOIN_EXISTING_SCHEMA,
    }.get(mode)
    if schema is None:
        raise ValidationError(
            f"Invalid mode {mode!r}, must be '{CREATE_MODE}' or "
            f"'{JOIN_EXISTING_MODE}'",
        )
    try:
        request = schema.validate(body)
    except SchemaError as error:
        raise ValidationError(f"Invalid request: {error.code}") from error

    if mode == CREATE_MODE:
        return CreateAccountRequest(request["accountName"], request["email"])
    return JoinExistingAccountRequest(
        request["govCloudAccountId"],
        request["commercialAccountId"],
        request["accountName"],
    )

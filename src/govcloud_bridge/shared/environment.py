# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Schema Validation for the Lambda environment variables
"""

import os

from schema import Schema, And, Use, Optional, Regex, SchemaError

from govcloud_bridge.shared.errors import InvalidConfigError
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)

AWS_ACCOUNT_ID_REGEX_STR = r"\A[0-9]{12}\Z"
NON_EMPTY_STRING = And(str, len)
ACCOUNT_ID = And(str, Regex(AWS_ACCOUNT_ID_REGEX_STR))
POSITIVE_INT = And(Use(int), lambda value: value > 0)
FLAG = Use(lambda value: str(value).strip().lower() in ("1", "true", "yes"))

ROLES_ANYWHERE_VARIABLES = (
    "COMMERCIAL_BRIDGE_CLIENT_CERT_SECRET_ARN",
    "COMMERCIAL_BRIDGE_TRUST_ANCHOR_ARN",
    "COMMERCIAL_BRIDGE_PROFILE_ARN",
    "COMMERCIAL_BRIDGE_ROLE_ARN",
)

COMMERCIAL_BRIDGE_ENVIRONMENT = {
    "COMMERCIAL_BRIDGE_API_URL": And(
        str,
        Regex(r"\Ahttps?://"),
        error="COMMERCIAL_BRIDGE_API_URL must be an http(s) URL",
    ),
    Optional("COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN"): NON_EMPTY_STRING,
    Optional("COMMERCIAL_BRIDGE_CLIENT_CERT_SECRET_ARN"): NON_EMPTY_STRING,
    Optional("COMMERCIAL_BRIDGE_TRUST_ANCHOR_ARN"): NON_EMPTY_STRING,
    Optional("COMMERCIAL_BRIDGE_PROFILE_ARN"): NON_EMPTY_STRING,
    Optional("COMMERCIAL_BRIDGE_ROLE_ARN"): NON_EMPTY_STRING,
    Optional("COMMERCIAL_BRIDGE_REGION"): NON_EMPTY_STRING,
    Optional(
        "ROLES_ANYWHERE_SIGNING_HELPER",
        default="/opt/bin/aws_signing_helper",
    ): NON_EMPTY_STRING,
}

GOVCLOUD_ORG_ENVIRONMENT = {
    "INTERMEDIATE_ROLE_ARN": NON_EMPTY_STRING,
    "ORG_MGT_ROLE_ARN": NON_EMPTY_STRING,
    "SANDBOX_OU_ID": NON_EMPTY_STRING,
    Optional("ENTRY_OU_NAME", default="Entry"): NON_EMPTY_STRING,
    Optional(
        "TARGET_ACCOUNT_ROLE_NAME",
        default="OrganizationAccountAccessRole",
    ): NON_EMPTY_STRING,
    Optional("GOVCLOUD_REGION", default="us-gov-west-1"): NON_EMPTY_STRING,
    Optional("ACCEPT_INVITATION_VIA_COMMERCIAL_BRIDGE", default=False): FLAG,
}

ACCOUNT_TABLE_ENVIRONMENT = {
    "ACCOUNT_TABLE_NAME": NON_EMPTY_STRING,
}

INVENTORY_ENVIRONMENT = {
    **ACCOUNT_TABLE_ENVIRONMENT,
    "ISB_EVENT_BUS": NON_EMPTY_STRING,
    "ISB_NAMESPACE": NON_EMPTY_STRING,
    "ORG_MGT_ACCOUNT_ID": ACCOUNT_ID,
    "IDC_ACCOUNT_ID": ACCOUNT_ID,
    "HUB_ACCOUNT_ID": ACCOUNT_ID,
}

WORKFLOW_ENVIRONMENT = {
    "GOVCLOUD_WORKFLOW_TABLE_NAME": NON_EMPTY_STRING,
    Optional("GOVCLOUD_WORKFLOW_ARN_PREFIX"): NON_EMPTY_STRING,
    Optional("CREATION_STATUS_POLL_SECONDS", default=5): POSITIVE_INT,
    Optional("STACK_SET_WAIT_SECONDS", default=120): POSITIVE_INT,
    Optional("WORKFLOW_TIMEOUT_SECONDS", default=2400): POSITIVE_INT,
    Optional("TASK_LEASE_SECONDS", default=900): POSITIVE_INT,
    Optional("INITIATE_CREATION_FUNCTION_NAME"): NON_EMPTY_STRING,
    Optional("CHECK_STATUS_FUNCTION_NAME"): NON_EMPTY_STRING,
    Optional("SEND_INVITATION_FUNCTION_NAME"): NON_EMPTY_STRING,
    Optional("ACCEPT_INVITATION_FUNCTION_NAME"): NON_EMPTY_STRING,
    Optional("MOVE_TO_ENTRY_OU_FUNCTION_NAME"): NON_EMPTY_STRING,
    Optional("REGISTER_IN_ISB_FUNCTION_NAME"): NON_EMPTY_STRING,
}


COMMERCIAL_BRIDGE_API_ENVIRONMENT = {
    Optional(
        "LINKED_ACCOUNT_ROLE_NAME",
        default="OrganizationAccountAccessRole",
    ): NON_EMPTY_STRING,
    Optional("COMMERCIAL_REGION", default="us-east-1"): NON_EMPTY_STRING,
    Optional("CREATE_ACCOUNT_POLL_ATTEMPTS", default=12): POSITIVE_INT,
    Optional("CREATE_ACCOUNT_POLL_SECONDS", default=5): POSITIVE_INT,
}

def load_environment(*schemas, env=None):
    """
    Validates the environment against one or more schema dictionaries and
    returns the validated values, with defaults filled in. Variables that
    no schema mentions are dropped.

    Raises:
        InvalidConfigError: When a required variable is missing or invalid.
    """
    env = os.environ if env is None else env
    combined = {}
    for schema in schemas:
        combined.update(schema)
    # Empty variables are treated as unset
    present = {key: value for key, value in env.items() if value != ""}
    try:
        return Schema(combined, ignore_extra_keys=True).validate(present)
    except SchemaError as error:
        LOGGER.error("Invalid environment configuration: %s", error.code)
        raise InvalidConfigError(
            f"Invalid environment configuration: {error.code}",
        ) from error


def has_commercial_bridge_auth(env):
    has_api_key = bool(env.get("COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN"))
    has_roles_anywhere = all(env.get(name) for name in ROLES_ANYWHERE_VARIABLES)
    return bool(env.get("COMMERCIAL_BRIDGE_API_URL")) and (
        has_api_key or has_roles_anywhere
    )

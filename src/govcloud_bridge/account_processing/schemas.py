# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Schema Validation for the step executor events
"""

from schema import Schema, And, Optional, Regex, SchemaError

from govcloud_bridge.shared.environment import AWS_ACCOUNT_ID_REGEX_STR
from govcloud_bridge.shared.errors import ValidationError

ACCOUNT_ID = And(str, Regex(AWS_ACCOUNT_ID_REGEX_STR))
ACCOUNT_NAME = And(str, lambda name: 1 <= len(name) <= 50)
NON_EMPTY_STRING = And(str, len)

CREATION_REQUEST = Schema({
    "accountName": ACCOUNT_NAME,
    "email": NON_EMPTY_STRING,
}, ignore_extra_keys=True)

CREATION_STATUS_REQUEST = Schema({
    "requestId": NON_EMPTY_STRING,
    Optional("accountName"): str,
    Optional("email"): str,
}, ignore_extra_keys=True)

LINKED_ACCOUNT_PAIR = Schema({
    "govCloudAccountId": ACCOUNT_ID,
    "commercialAccountId": ACCOUNT_ID,
    "accountName": ACCOUNT_NAME,
}, ignore_extra_keys=True)

INVITATION_HANDSHAKE = Schema({
    "govCloudAccountId": ACCOUNT_ID,
    "commercialAccountId": ACCOUNT_ID,
    "handshakeId": NON_EMPTY_STRING,
    Optional("accountName"): str,
}, ignore_extra_keys=True)


def validate_event(schema, event):
    try:
        return schema.validate(event)
    except SchemaError as error:
        raise ValidationError(f"Invalid step input: {error.code}") from error

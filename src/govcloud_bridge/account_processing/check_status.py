# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Reads the status of an account creation request from the commercial bridge.
"""

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import commercial_bridge_client
from govcloud_bridge.account_processing.schemas import (
    CREATION_STATUS_REQUEST,
    validate_event,
)
from govcloud_bridge.shared.logger import configure_logger

patch_all()

LOGGER = configure_logger(__name__)


def check_status(event, bridge_client):
    event = validate_event(CREATION_STATUS_REQUEST, event)
    result = bridge_client.get_account_status(event["requestId"])
    LOGGER.info(
        "Account creation %s is %s (GovCloud account: %s)",
        event["requestId"],
        result.get("status"),
        result.get("govCloudAccountId"),
    )
    return {
        "requestId": event["requestId"],
        "status": result.get("status"),
        "govCloudAccountId": result.get("govCloudAccountId"),
        "commercialAccountId": result.get("commercialAccountId"),
        "accountName": event.get("accountName"),
        "email": event.get("email"),
        "message": result.get("message"),
    }


def lambda_handler(event, _):
    return check_status(event, commercial_bridge_client())

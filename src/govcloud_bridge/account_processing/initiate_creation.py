# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Starts the creation of a GovCloud account through the commercial bridge.
"""

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import commercial_bridge_client
from govcloud_bridge.account_processing.schemas import CREATION_REQUEST, validate_event
from govcloud_bridge.shared.logger import configure_logger

patch_all()

LOGGER = configure_logger(__name__)


def initiate_creation(event, bridge_client):
    event = validate_event(CREATION_REQUEST, event)
    LOGGER.info("Initiating GovCloud account creation for %s", event["accountName"])
    result = bridge_client.create_account(event["accountName"], event["email"])
    LOGGER.info("Account creation initiated: %s", result["requestId"])
    return {
        "requestId": result["requestId"],
        "status": result.get("status"),
        "accountName": event["accountName"],
        "email": event["email"],
    }


def lambda_handler(event, _):
    return initiate_creation(event, commercial_bridge_client())

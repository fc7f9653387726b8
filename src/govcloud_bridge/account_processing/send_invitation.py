# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Invites the GovCloud account into the sandbox organization.
"""

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import org_management_organizations
from govcloud_bridge.account_processing.schemas import (
    LINKED_ACCOUNT_PAIR,
    validate_event,
)
from govcloud_bridge.shared.environment import GOVCLOUD_ORG_ENVIRONMENT, load_environment
from govcloud_bridge.shared.logger import configure_logger

patch_all()

LOGGER = configure_logger(__name__)


def send_invitation(event, organizations):
    event = validate_event(LINKED_ACCOUNT_PAIR, event)
    LOGGER.info("Sending organization invitation to %s", event["govCloudAccountId"])
    handshake_id = organizations.invite_account(event["govCloudAccountId"])
    LOGGER.info(
        "Invitation for %s: %s",
        event["govCloudAccountId"],
        handshake_id,
    )
    return {
        "govCloudAccountId": event["govCloudAccountId"],
        "commercialAccountId": event["commercialAccountId"],
        "handshakeId": handshake_id,
        "accountName": event["accountName"],
    }


def lambda_handler(event, _):
    env = load_environment(GOVCLOUD_ORG_ENVIRONMENT)
    return send_invitation(
        event,
        org_management_organizations(env, "SendOrganizationInvitation"),
    )

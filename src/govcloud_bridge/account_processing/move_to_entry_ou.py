# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Moves the account to the Entry OU. The move triggers the stack set that
deploys the sandbox role into the account.
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


def move_to_entry_ou(event, organizations, sandbox_ou_id, entry_ou_name="Entry"):
    event = validate_event(LINKED_ACCOUNT_PAIR, event)
    entry_ou_id = organizations.get_child_ou_id(sandbox_ou_id, entry_ou_name)
    LOGGER.info(
        "Ensuring account %s is in OU %s (%s)",
        event["govCloudAccountId"],
        entry_ou_name,
        entry_ou_id,
    )
    organizations.move_account(event["govCloudAccountId"], entry_ou_id)
    return {
        "govCloudAccountId": event["govCloudAccountId"],
        "commercialAccountId": event["commercialAccountId"],
        "accountName": event["accountName"],
    }


def lambda_handler(event, _):
    env = load_environment(GOVCLOUD_ORG_ENVIRONMENT)
    return move_to_entry_ou(
        event,
        org_management_organizations(env, "MoveToEntryOU"),
        env["SANDBOX_OU_ID"],
        env["ENTRY_OU_NAME"],
    )

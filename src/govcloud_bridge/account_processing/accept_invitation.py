# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Accepts the organization invitation on behalf of the GovCloud account.

The acceptance is skipped when the invitation step found the account to be
a member already. A handshake that was accepted before counts as success.
"""

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import (
    commercial_bridge_client,
    member_account_organizations,
)
from govcloud_bridge.account_processing.schemas import (
    INVITATION_HANDSHAKE,
    validate_event,
)
from govcloud_bridge.shared.environment import GOVCLOUD_ORG_ENVIRONMENT, load_environment
from govcloud_bridge.shared.logger import configure_logger
from govcloud_bridge.shared.organizations import ALREADY_JOINED_HANDSHAKE_ID

patch_all()

LOGGER = configure_logger(__name__)


def accept_invitation(event, accept_handshake):
    """
    Args:
        event (dict): govCloudAccountId, commercialAccountId, handshakeId and
            optionally accountName.
        accept_handshake (callable): Called with the validated event when
            the handshake has to be accepted. Either accept_as_member_account
            or accept_via_commercial_bridge bound to their clients.

    Returns:
        dict: The account ids and name, unchanged.
    """
    event = validate_event(INVITATION_HANDSHAKE, event)
    output = {
        "govCloudAccountId": event["govCloudAccountId"],
        "commercialAccountId": event["commercialAccountId"],
        "accountName": event.get("accountName"),
    }
    if event["handshakeId"] == ALREADY_JOINED_HANDSHAKE_ID:
        LOGGER.info(
            "Account %s already in organization, skipping acceptance",
            event["govCloudAccountId"],
        )
        return output

    accept_handshake(event)
    LOGGER.info("Invitation accepted for %s", event["govCloudAccountId"])
    return output


def accept_as_member_account(organizations_for_account):
    def _accept(event):
        organizations = organizations_for_account(event["govCloudAccountId"])
        organizations.accept_handshake(event["handshakeId"])
    return _accept


def accept_via_commercial_bridge(bridge_client, govcloud_region):
    def _accept(event):
        bridge_client.accept_invitation(
            event["govCloudAccountId"],
            event["handshakeId"],
            govcloud_region,
            event["commercialAccountId"],
        )
    return _accept


def lambda_handler(event, _):
    env = load_environment(GOVCLOUD_ORG_ENVIRONMENT)
    if env["ACCEPT_INVITATION_VIA_COMMERCIAL_BRIDGE"]:
        accept_handshake = accept_via_commercial_bridge(
            commercial_bridge_client(),
            env["GOVCLOUD_REGION"],
        )
    else:
        accept_handshake = accept_as_member_account(
            lambda account_id: member_account_organizations(
                env, account_id, "AcceptOrganizationInvitation",
            ),
        )
    return accept_invitation(event, accept_handshake)

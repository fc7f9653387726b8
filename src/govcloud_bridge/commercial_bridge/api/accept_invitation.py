# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
POST /govcloud-accounts/accept-invitation

Accepts a GovCloud organization invitation for a GovCloud account that the
GovCloud side cannot reach yet. The linked commercial account is trusted by
its GovCloud account, so the function assumes the access role in the
commercial account first and from there the access role in the GovCloud
account, which then accepts the handshake.
"""

from aws_xray_sdk.core import patch_all
from botocore.exceptions import ClientError
from schema import Schema, And, Regex

from govcloud_bridge.commercial_bridge.api.responses import (
    api_error,
    api_response,
    parse_request,
)
from govcloud_bridge.shared.environment import (
    AWS_ACCOUNT_ID_REGEX_STR,
    COMMERCIAL_BRIDGE_API_ENVIRONMENT,
    load_environment,
)
from govcloud_bridge.shared.errors import ValidationError
from govcloud_bridge.shared.logger import configure_logger, log_event
from govcloud_bridge.shared.organizations import Organizations
from govcloud_bridge.shared.partition import GOVCLOUD_PARTITION, build_role_arn
from govcloud_bridge.shared.sts import STS

patch_all()

LOGGER = configure_logger(__name__)

COMMERCIAL_PARTITION = "aws"
COMMERCIAL_SESSION_NAME = "BridgeToGovCloud"
GOVCLOUD_SESSION_NAME = "AcceptOrgInvitation"

ACCOUNT_ID = And(str, Regex(AWS_ACCOUNT_ID_REGEX_STR))
REQUIRED_FIELDS_MESSAGE = (
    "govCloudAccountId, handshakeId, govCloudRegion, and "
    "commercialLinkedAccountId are required"
)

ACCEPT_INVITATION_REQUEST = Schema({
    "govCloudAccountId": And(ACCOUNT_ID, error=REQUIRED_FIELDS_MESSAGE),
    "handshakeId": And(str, len, error=REQUIRED_FIELDS_MESSAGE),
    "govCloudRegion": And(str, len, error=REQUIRED_FIELDS_MESSAGE),
    "commercialLinkedAccountId": And(ACCOUNT_ID, error=REQUIRED_FIELDS_MESSAGE),
}, ignore_extra_keys=True)


def govcloud_organizations(request, sts, role_name):
    """
    Returns an Organizations wrapper acting as the GovCloud account, reached
    through its linked commercial account.
    """
    commercial_session = sts.assume_cross_account_role(
        build_role_arn(
            COMMERCIAL_PARTITION,
            request["commercialLinkedAccountId"],
            role_name,
        ),
        COMMERCIAL_SESSION_NAME,
    )
    linked_sts = STS(
        commercial_session.client("sts"),
        region_name=request["govCloudRegion"],
    )
    govcloud_session = linked_sts.assume_cross_account_role(
        build_role_arn(GOVCLOUD_PARTITION, request["govCloudAccountId"], role_name),
        GOVCLOUD_SESSION_NAME,
    )
    return Organizations(
        session=govcloud_session,
        region_name=request["govCloudRegion"],
    )


def accept_govcloud_invitation(request, organizations_for_request):
    """
    Args:
        request (dict): The validated invitation request.
        organizations_for_request (callable): Returns the Organizations
            wrapper acting as the invited GovCloud account.

    Returns:
        dict: ACCEPTED status. handshakeState is left out when the account
            already was a member and nothing had to be accepted.
    """
    LOGGER.info(
        "Accepting GovCloud organization invitation %s for account %s "
        "using commercial linked account %s",
        request["handshakeId"],
        request["govCloudAccountId"],
        request["commercialLinkedAccountId"],
    )
    organizations = organizations_for_request(request)
    accepted = organizations.accept_handshake(request["handshakeId"])
    body = {
        "status": "ACCEPTED",
        "handshakeId": request["handshakeId"],
        "govCloudAccountId": request["govCloudAccountId"],
    }
    if accepted:
        body["handshakeState"] = "ACCEPTED"
    return body


def handle_request(event, organizations_for_request):
    try:
        request = parse_request(ACCEPT_INVITATION_REQUEST, event)
        return api_response(
            200,
            accept_govcloud_invitation(request, organizations_for_request),
        )
    except ValidationError as error:
        LOGGER.warning("Rejected invitation request: %s", error)
        return api_error(400, str(error))
    except ClientError as error:
        LOGGER.error("Error accepting invitation: %s", error)
        return api_error(500, "Failed to accept invitation", str(error))


def lambda_handler(event, _):
    log_event(LOGGER, "Accept invitation request", event)
    env = load_environment(COMMERCIAL_BRIDGE_API_ENVIRONMENT)
    sts = STS(region_name=env["COMMERCIAL_REGION"])
    return handle_request(
        event,
        lambda request: govcloud_organizations(
            request,
            sts,
            env["LINKED_ACCOUNT_ROLE_NAME"],
        ),
    )

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
/govcloud-accounts

POST creates a GovCloud account together with its commercial account and
polls the creation for a short while. GET lists the created GovCloud
accounts, GET /{requestId} reads the status of one creation request.
"""

import time
from datetime import datetime, timezone

import boto3
from aws_xray_sdk.core import patch_all
from botocore.exceptions import ClientError
from schema import Schema, And, Optional, Regex, Use

from govcloud_bridge.commercial_bridge.api.linked_accounts import LinkedAccountDirectory
from govcloud_bridge.commercial_bridge.api.responses import (
    api_error,
    api_response,
    parse_request,
)
from govcloud_bridge.shared.environment import (
    COMMERCIAL_BRIDGE_API_ENVIRONMENT,
    load_environment,
)
from govcloud_bridge.shared.errors import ValidationError
from govcloud_bridge.shared.logger import configure_logger, log_event
from govcloud_bridge.shared.organizations import Organizations, error_code

patch_all()

LOGGER = configure_logger(__name__)

SUCCEEDED = "SUCCEEDED"
FAILED = "FAILED"
IN_PROGRESS = "IN_PROGRESS"
STATUS_NOT_FOUND_ERROR_CODE = "CreateAccountStatusNotFoundException"

CREATE_ACCOUNT_REQUEST = Schema({
    "email": And(
        str,
        Regex(r"\A[^\s@]+@[^\s@]+\.[^\s@]+\Z"),
        error="Valid email is required",
    ),
    "accountName": And(
        str,
        Use(str.strip),
        len,
        error="accountName is required",
    ),
    Optional("roleName", default="OrganizationAccountAccessRole"): And(str, len),
    Optional("iamUserAccessToBilling", default="DENY"): And(
        str,
        lambda value: value in ("ALLOW", "DENY"),
        error="iamUserAccessToBilling must be ALLOW or DENY",
    ),
}, ignore_extra_keys=True)


def _utc_now():
    return datetime.now(timezone.utc)


def creation_status_body(request_id, status, now):
    """
    Maps a CreateAccountStatus to the bridge response. The commercial
    account id is the AccountId of the request.
    """
    state = status.get("State") or "UNKNOWN"
    completed = status.get("CompletedTimestamp")
    body = {
        "requestId": request_id,
        "status": state,
        "createTime": (completed or now).isoformat(),
    }
    if state == SUCCEEDED:
        body["govCloudAccountId"] = status.get("GovCloudAccountId")
        body["commercialAccountId"] = status.get("AccountId")
    elif state == FAILED:
        body["message"] = status.get("FailureReason") or "Account creation failed"
    return body


def describe_creation(request_id, organizations_client, now=None):
    LOGGER.info("Checking status for request %s", request_id)
    status = organizations_client.describe_create_account_status(
        CreateAccountRequestId=request_id,
    )["CreateAccountStatus"]
    return creation_status_body(request_id, status, now or _utc_now())


def create_govcloud_account(
    request,
    organizations_client,
    poll_attempts=12,
    poll_seconds=5,
    sleep=time.sleep,
    clock=_utc_now,
):
    """
    Starts the creation and polls it for poll_attempts * poll_seconds.
    Creations that take longer are reported IN_PROGRESS, the caller keeps
    polling GET /govcloud-accounts/{requestId}.

    Returns:
        tuple(int, dict): 200 when the account exists, 202 otherwise, and
            the response body.
    """
    LOGGER.info(
        "Creating GovCloud account %s (%s)",
        request["accountName"],
        request["email"],
    )
    response = organizations_client.create_gov_cloud_account(
        Email=request["email"],
        AccountName=request["accountName"],
        RoleName=request["roleName"],
        IamUserAccessToBilling=request["iamUserAccessToBilling"],
    )
    request_id = response["CreateAccountStatus"]["Id"]
    LOGGER.info("Account creation initiated: %s", request_id)

    for attempt in range(poll_attempts):
        body = describe_creation(request_id, organizations_client, now=clock())
        LOGGER.debug("Attempt %d: status = %s", attempt + 1, body["status"])
        if body["status"] == SUCCEEDED:
            return 200, body
        if body["status"] == FAILED:
            return 202, body
        sleep(poll_seconds)

    return 202, {
        "requestId": request_id,
        "status": IN_PROGRESS,
        "createTime": clock().isoformat(),
        "message": (
            "Account creation is still in progress. "
            "Check status using the requestId."
        ),
    }


def handle_request(event, organizations_client, directory, env, sleep=time.sleep):
    method = event.get("httpMethod")
    request_id = (event.get("pathParameters") or {}).get("requestId")
    try:
        if method == "GET" and request_id:
            return api_response(200, describe_creation(request_id, organizations_client))
        if method == "GET":
            return api_response(200, {"accounts": directory.list_linked_accounts()})
        if method == "POST":
            request = parse_request(CREATE_ACCOUNT_REQUEST, event)
            status_code, body = create_govcloud_account(
                request,
                organizations_client,
                poll_attempts=env["CREATE_ACCOUNT_POLL_ATTEMPTS"],
                poll_seconds=env["CREATE_ACCOUNT_POLL_SECONDS"],
                sleep=sleep,
            )
            return api_response(status_code, body)
    except ValidationError as error:
        LOGGER.warning("Rejected account request: %s", error)
        return api_error(400, str(error))
    except ClientError as error:
        if error_code(error) == STATUS_NOT_FOUND_ERROR_CODE:
            return api_error(404, "Account creation request not found", str(error))
        LOGGER.error("Error handling GovCloud account request: %s", error)
        return api_error(500, "Failed to create GovCloud account", str(error))
    return api_error(405, "Method not allowed")


def lambda_handler(event, _):
    log_event(LOGGER, "GovCloud account request", event)
    env = load_environment(COMMERCIAL_BRIDGE_API_ENVIRONMENT)
    organizations = Organizations(session=boto3.Session())
    return handle_request(
        event,
        organizations.client,
        LinkedAccountDirectory(organizations),
        env,
    )

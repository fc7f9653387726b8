# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
POST /cost-info

Queries Cost Explorer of the commercial management account for the costs of
one linked account, broken down by service. GovCloud usage is billed to the
linked commercial account, so a GovCloud account id is first resolved to
its commercial account. An unknown mapping answers 404.
"""

from datetime import date

import boto3
from aws_xray_sdk.core import patch_all
from botocore.exceptions import ClientError
from schema import Schema, And, Optional, Regex

from govcloud_bridge.commercial_bridge.api.linked_accounts import LinkedAccountDirectory
from govcloud_bridge.commercial_bridge.api.responses import (
    api_error,
    api_response,
    parse_request,
)
from govcloud_bridge.commercial_bridge.exceptions import AccountMappingNotFoundError
from govcloud_bridge.shared.environment import AWS_ACCOUNT_ID_REGEX_STR
from govcloud_bridge.shared.errors import ValidationError
from govcloud_bridge.shared.logger import configure_logger, log_event
from govcloud_bridge.shared.organizations import Organizations

patch_all()

LOGGER = configure_logger(__name__)

COST_METRIC = "UnblendedCost"
CURRENCY = "USD"


def _is_date(value):
    try:
        date.fromisoformat(value)
        return True
    except ValueError:
        return False


ACCOUNT_ID = And(str, Regex(AWS_ACCOUNT_ID_REGEX_STR))
ISO_DATE = And(
    str,
    Regex(r"\A\d{4}-\d{2}-\d{2}\Z"),
    _is_date,
    error="startDate and endDate must be in YYYY-MM-DD format",
)

COST_QUERY = Schema({
    "linkedAccountId": And(ACCOUNT_ID, error="linkedAccountId is required"),
    "startDate": ISO_DATE,
    "endDate": ISO_DATE,
    Optional("granularity", default="DAILY"): And(
        str,
        lambda value: value in ("DAILY", "MONTHLY"),
        error="granularity must be DAILY or MONTHLY",
    ),
    Optional("isGovCloudAccountId", default=False): bool,
    Optional("commercialAccountId"): ACCOUNT_ID,
    Optional("region"): And(str, len),
}, ignore_extra_keys=True)


def _cost_filter(linked_account_id, region):
    filters = [{
        "Dimensions": {"Key": "LINKED_ACCOUNT", "Values": [linked_account_id]},
    }]
    if region:
        filters.append({"Dimensions": {"Key": "REGION", "Values": [region]}})
    return filters[0] if len(filters) == 1 else {"And": filters}


def _cost_by_service(cost_explorer, query):
    costs = {}
    kwargs = query
    while True:
        response = cost_explorer.get_cost_and_usage(**kwargs)
        for result in response.get("ResultsByTime", []):
            for group in result.get("Groups", []):
                service = (group.get("Keys") or ["Unknown"])[0]
                amount = float(
                    group.get("Metrics", {}).get(COST_METRIC, {}).get("Amount") or 0
                )
                costs[service] = costs.get(service, 0.0) + amount
        if not response.get("NextPageToken"):
            return costs
        kwargs = {**query, "NextPageToken": response["NextPageToken"]}


def get_cost_information(request, cost_explorer, directory):
    """
    Args:
        request (dict): The validated cost query.
        cost_explorer (boto3.client): Cost Explorer of the management account.
        directory (LinkedAccountDirectory): Resolves GovCloud account ids.

    Returns:
        dict: Total and per-service cost of the window, rounded to cents.

    Raises:
        ValidationError: When the window ends before it starts.
        AccountMappingNotFoundError: When a GovCloud account id has no
            linked commercial account.
    """
    if request["startDate"] > request["endDate"]:
        raise ValidationError("startDate must be before endDate")

    body = {"linkedAccountId": request["linkedAccountId"]}
    linked_account_id = request["linkedAccountId"]
    if request["isGovCloudAccountId"]:
        commercial_account_id = (
            request.get("commercialAccountId")
            or directory.find_commercial_account_id(linked_account_id)
        )
        if not commercial_account_id:
            raise AccountMappingNotFoundError(linked_account_id)
        body["govCloudAccountId"] = linked_account_id
        body["commercialAccountId"] = commercial_account_id
        linked_account_id = commercial_account_id

    LOGGER.info(
        "Querying Cost Explorer for %s from %s to %s (%s)",
        linked_account_id,
        request["startDate"],
        request["endDate"],
        request.get("region", "all regions"),
    )
    costs = _cost_by_service(cost_explorer, {
        "TimePeriod": {"Start": request["startDate"], "End": request["endDate"]},
        "Granularity": request["granularity"],
        "Metrics": [COST_METRIC],
        "Filter": _cost_filter(linked_account_id, request.get("region")),
        "GroupBy": [{"Type": "DIMENSION", "Key": "SERVICE"}],
    })
    breakdown = sorted(
        (
            {"service": service, "cost": round(cost, 2)}
            for service, cost in costs.items()
        ),
        key=lambda item: item["cost"],
        reverse=True,
    )
    return {
        **body,
        "startDate": request["startDate"],
        "endDate": request["endDate"],
        "totalCost": round(sum(costs.values()), 2),
        "currency": CURRENCY,
        "breakdown": breakdown,
    }


def handle_request(event, cost_explorer, directory):
    try:
        request = parse_request(COST_QUERY, event)
        return api_response(200, get_cost_information(request, cost_explorer, directory))
    except ValidationError as error:
        LOGGER.warning("Rejected cost query: %s", error)
        return api_error(400, str(error))
    except AccountMappingNotFoundError as error:
        LOGGER.warning("%s", error)
        return api_error(404, "Account mapping not found", str(error))
    except ClientError as error:
        LOGGER.error("Error querying cost information: %s", error)
        return api_error(500, "Failed to retrieve cost information", str(error))


def lambda_handler(event, _):
    log_event(LOGGER, "Cost information request", event)
    return handle_request(
        event,
        boto3.client("ce"),
        LinkedAccountDirectory(Organizations(session=boto3.Session())),
    )

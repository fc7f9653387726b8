# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Lambda entry points of the GovCloud account workflow: submission, status,
stop, the scheduled tick that advances running executions, and the listing
of GovCloud accounts that can still be joined.
"""

import json
import os

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import commercial_bridge_client
from govcloud_bridge.inventory.account_store import SandboxAccountStore
from govcloud_bridge.shared.environment import (
    ACCOUNT_TABLE_ENVIRONMENT,
    COMMERCIAL_BRIDGE_ENVIRONMENT,
    WORKFLOW_ENVIRONMENT,
    has_commercial_bridge_auth,
    load_environment,
)
from govcloud_bridge.shared.errors import (
    CheckpointConflictError,
    ExecutionNotFoundError,
    ValidationError,
)
from govcloud_bridge.shared.logger import configure_logger, log_event
from govcloud_bridge.workflow.invokers import LambdaStepInvoker
from govcloud_bridge.workflow.orchestrator import WorkflowOrchestrator, WorkflowTimings
from govcloud_bridge.workflow.requests import CREATE_MODE, parse_request
from govcloud_bridge.workflow.store import ExecutionStore

patch_all()

LOGGER = configure_logger(__name__)

SUBMISSION_MESSAGES = {
    CREATE_MODE: (
        "GovCloud account creation started. This will take 5-10 minutes."
    ),
    "join-existing": (
        "GovCloud account join workflow started. This will take 3-5 minutes."
    ),
}


def _response(status_code, body):
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def _error(status_code, message):
    return _response(status_code, {"message": message})


def _execution_id(event):
    execution_id = (event.get("pathParameters") or {}).get("executionId")
    if not execution_id:
        raise ValidationError("executionId is required")
    return execution_id


def create_orchestrator(env=None):
    """
    Returns the orchestrator for the environment, or None when the workflow
    table is not configured.
    """
    env = os.environ if env is None else env
    if not env.get("GOVCLOUD_WORKFLOW_TABLE_NAME"):
        return None
    config = load_environment(WORKFLOW_ENVIRONMENT, env=env)
    return WorkflowOrchestrator(
        ExecutionStore(config["GOVCLOUD_WORKFLOW_TABLE_NAME"]),
        LambdaStepInvoker.from_environment(config),
        timings=WorkflowTimings.from_environment(config),
        arn_prefix=config.get("GOVCLOUD_WORKFLOW_ARN_PREFIX"),
    )


def submit_request(event, orchestrator):
    if orchestrator is None:
        return _error(501, "GovCloud account workflow is not configured")
    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError:
        return _error(400, "Request body must be valid JSON")
    try:
        request = parse_request(body)
    except ValidationError as error:
        LOGGER.warning("Rejected account request: %s", error)
        return _error(error.status_code, str(error))

    execution = orchestrator.start_execution(request.to_input())
    return _response(202, {
        "executionId": execution.execution_id,
        "executionArn": execution.execution_arn,
        "message": SUBMISSION_MESSAGES[request.mode],
        "mode": request.mode,
    })


def describe_request(event, orchestrator):
    if orchestrator is None:
        return _error(501, "GovCloud account workflow is not configured")
    try:
        execution = orchestrator.describe_execution(_execution_id(event))
    except ValidationError as error:
        return _error(error.status_code, str(error))
    except ExecutionNotFoundError as error:
        return _error(404, str(error))
    return _response(200, execution.to_status_response())


def stop_request(event, orchestrator):
    if orchestrator is None:
        return _error(501, "GovCloud account workflow is not configured")
    try:
        execution = orchestrator.stop_execution(_execution_id(event))
    except ValidationError as error:
        return _error(error.status_code, str(error))
    except ExecutionNotFoundError as error:
        return _error(404, str(error))
    except CheckpointConflictError as error:
        LOGGER.warning("Stop request conflicted with a running advance: %s", error)
        return _error(409, str(error))
    return _response(200, execution.to_status_response())


def list_available_accounts(bridge_client, account_store):
    """
    GovCloud accounts known to the commercial bridge that are not in the
    inventory yet, neither by GovCloud nor by commercial account id.
    """
    registered_ids = set()
    for record in account_store.find_all():
        registered_ids.add(record.aws_account_id)
        if record.commercial_linked_account_id:
            registered_ids.add(record.commercial_linked_account_id)
    return [
        account for account in bridge_client.list_accounts()
        if account["govCloudAccountId"] not in registered_ids
        and account["commercialAccountId"] not in registered_ids
    ]


def submit_handler(event, _):
    log_event(LOGGER, "Account request received", event)
    return submit_request(event, create_orchestrator())


def status_handler(event, _):
    return describe_request(event, create_orchestrator())


def stop_handler(event, _):
    return stop_request(event, create_orchestrator())


def tick_handler(event, _):
    """
    Scheduled every minute, advances every running execution that is due
    """
    orchestrator = create_orchestrator()
    if orchestrator is None:
        LOGGER.warning("GovCloud account workflow is not configured, skipping")
        return {"advanced": 0}
    executions = orchestrator.advance_due()
    statuses = {}
    for execution in executions:
        statuses[execution.status.value] = statuses.get(execution.status.value, 0) + 1
    LOGGER.info("Advanced %d executions: %s", len(executions), statuses)
    return {"advanced": len(executions), "statuses": statuses}


def available_accounts_handler(event, _):
    if not has_commercial_bridge_auth(os.environ):
        return _error(501, "Commercial bridge is not configured")
    env = load_environment(COMMERCIAL_BRIDGE_ENVIRONMENT, ACCOUNT_TABLE_ENVIRONMENT)
    LOGGER.debug("Listing available accounts via %s", env["COMMERCIAL_BRIDGE_API_URL"])
    accounts = list_available_accounts(
        commercial_bridge_client(),
        SandboxAccountStore(env["ACCOUNT_TABLE_NAME"]),
    )
    return _response(200, {"accounts": accounts})

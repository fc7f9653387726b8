# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Registers the joined account in the sandbox inventory together with its
commercial account link.

Re-running the step for an account that was registered already only fills
in a missing commercial link.
"""

from aws_xray_sdk.core import patch_all

from govcloud_bridge.account_processing.clients import org_management_organizations
from govcloud_bridge.account_processing.schemas import (
    LINKED_ACCOUNT_PAIR,
    validate_event,
)
from govcloud_bridge.inventory.account_store import SandboxAccountStore
from govcloud_bridge.inventory.registration import (
    RegistrationCollaborators,
    register_account,
    reserved_account_ids_from_environment,
)
from govcloud_bridge.shared.environment import (
    GOVCLOUD_ORG_ENVIRONMENT,
    INVENTORY_ENVIRONMENT,
    load_environment,
)
from govcloud_bridge.shared.events import SandboxEvents
from govcloud_bridge.shared.logger import configure_logger

patch_all()

LOGGER = configure_logger(__name__)


def register_in_isb(event, collaborators):
    event = validate_event(LINKED_ACCOUNT_PAIR, event)
    govcloud_account_id = event["govCloudAccountId"]
    commercial_account_id = event["commercialAccountId"]
    output = {
        "govCloudAccountId": govcloud_account_id,
        "commercialAccountId": commercial_account_id,
        "accountName": event["accountName"],
        "status": "SUCCESS",
    }

    existing = collaborators.account_store.get(govcloud_account_id)
    if existing:
        LOGGER.info(
            "Account %s already registered, ensuring commercial account link",
            govcloud_account_id,
        )
        collaborators.account_store.link_commercial_account(
            govcloud_account_id,
            commercial_account_id,
        )
        return {**output, "message": "GovCloud account was already registered"}

    register_account(
        govcloud_account_id,
        collaborators,
        commercial_linked_account_id=commercial_account_id,
        account_name=event["accountName"],
    )
    return {
        **output,
        "message": (
            "GovCloud account created, joined organization, "
            "and registered successfully"
        ),
    }


def lambda_handler(event, _):
    env = load_environment(GOVCLOUD_ORG_ENVIRONMENT, INVENTORY_ENVIRONMENT)
    collaborators = RegistrationCollaborators(
        account_store=SandboxAccountStore(env["ACCOUNT_TABLE_NAME"]),
        events=SandboxEvents(
            "RegisterInISB",
            namespace=env["ISB_NAMESPACE"],
            eventbus_name=env["ISB_EVENT_BUS"],
        ),
        reserved_account_ids=reserved_account_ids_from_environment(env),
        organizations=org_management_organizations(env, "RegisterInISB"),
    )
    return register_in_isb(event, collaborators)

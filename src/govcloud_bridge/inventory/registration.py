# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Registers a GovCloud account in the sandbox inventory
"""

from dataclasses import dataclass
from typing import Any, FrozenSet

from govcloud_bridge.inventory.account_store import InventoryAccountRecord
from govcloud_bridge.shared.errors import ReservedAccountError
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)
CLEAN_ACCOUNT_REQUEST_EVENT = "CleanAccountRequest"


@dataclass(frozen=True)
class RegistrationCollaborators:
    account_store: Any
    events: Any
    reserved_account_ids: FrozenSet[str]
    organizations: Any = None


def reserved_account_ids_from_environment(env):
    return frozenset((
        env["ORG_MGT_ACCOUNT_ID"],
        env["IDC_ACCOUNT_ID"],
        env["HUB_ACCOUNT_ID"],
    ))


def register_account(
    govcloud_account_id,
    collaborators,
    commercial_linked_account_id=None,
    account_name=None,
):
    """
    Writes the inventory record for a freshly joined account and asks the
    downstream cleanup process to prepare it.

    Args:
        govcloud_account_id (str): The account to register.
        collaborators (RegistrationCollaborators): Store, event emitter and
            the reserved administrative account ids.
        commercial_linked_account_id (str|None): The linked commercial
            account, required later on for cost reporting.
        account_name (str|None): Used when Organizations has no name.

    Raises:
        ReservedAccountError: For the organization management, identity
            center and hub accounts. Nothing is written in that case.
        AccountAlreadyRegisteredError: When a record exists already.
    """
    if govcloud_account_id in collaborators.reserved_account_ids:
        raise ReservedAccountError(
            f"Account {govcloud_account_id} is an administrative account "
            "and cannot be registered as a sandbox account",
        )

    email = None
    if collaborators.organizations is not None:
        details = collaborators.organizations.describe_account(govcloud_account_id) or {}
        account_name = details.get("Name") or account_name
        email = details.get("Email")

    record = collaborators.account_store.create(InventoryAccountRecord(
        aws_account_id=govcloud_account_id,
        name=account_name,
        email=email,
        commercial_linked_account_id=commercial_linked_account_id,
    ))
    collaborators.events.put_event(
        CLEAN_ACCOUNT_REQUEST_EVENT,
        {"accountId": govcloud_account_id, "reason": "AccountRegistered"},
        resources=[govcloud_account_id],
    )
    LOGGER.info("Registered account %s", govcloud_account_id)
    return record

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Organizations module used to invite GovCloud accounts into the sandbox
organization and to place them in the right organizational unit
"""

from botocore.config import Config
from botocore.exceptions import ClientError

from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)

ALREADY_JOINED_HANDSHAKE_ID = "already-joined"
OPEN_HANDSHAKE_STATES = ("REQUESTED", "OPEN")

ACCOUNT_NOT_FOUND_ERROR_CODE = "AccountNotFoundException"
DUPLICATE_HANDSHAKE_ERROR_CODE = "DuplicateHandshakeException"
DUPLICATE_ACCOUNT_ERROR_CODE = "DuplicateAccountException"
HANDSHAKE_ALREADY_IN_STATE_ERROR_CODE = "HandshakeAlreadyInStateException"
HANDSHAKE_CONSTRAINT_ERROR_CODE = "HandshakeConstraintViolationException"
ALREADY_IN_AN_ORGANIZATION_REASON = "ALREADY_IN_AN_ORGANIZATION"


class OrganizationsException(Exception):
    pass


def error_code(error):
    return error.response.get("Error", {}).get("Code")


def error_reason(error):
    # Modeled Organizations errors carry the reason next to the error block
    return (
        error.response.get("Reason")
        or error.response.get("Error", {}).get("Reason")
    )


def is_already_member_error(error):
    """
    Returns True when accepting a handshake failed only because the account
    already reached the desired state: the handshake was accepted earlier, or
    the account already is a member of an organization.
    """
    code = error_code(error)
    if code == HANDSHAKE_ALREADY_IN_STATE_ERROR_CODE:
        return True
    return (
        code == HANDSHAKE_CONSTRAINT_ERROR_CODE
        and error_reason(error) == ALREADY_IN_AN_ORGANIZATION_REASON
    )


class Organizations:
    """
    Class used for modeling Organizations
    """

    _config = Config(
        retries={
            "max_attempts": 30,
        },
    )

    def __init__(self, session=None, org_client=None, region_name=None):
        if not session and not org_client:
            raise OrganizationsException(
                "If a session isn't provided, please provide an org_client"
            )
        self.client = (
            org_client
            if org_client
            else session.client(
                "organizations",
                region_name=region_name,
                config=Organizations._config,
            )
        )

    def _paginate(self, operation_name, **kwargs):
        iterator = self.client.get_paginator(operation_name)
        for page in iterator.paginate(**kwargs).result_key_iters():
            for result in page:
                yield result

    def describe_account(self, account_id):
        """
        Returns the account details, or None when the account is not a
        member of this organization.
        """
        try:
            return self.client.describe_account(AccountId=account_id)["Account"]
        except ClientError as error:
            if error_code(error) == ACCOUNT_NOT_FOUND_ERROR_CODE:
                return None
            raise

    def is_member(self, account_id):
        return self.describe_account(account_id) is not None

    def find_open_handshake(self, account_id):
        """
        Returns the id of an invitation to the given account that has not
        been accepted, declined or canceled yet, or None.
        """
        for handshake in self._paginate(
            "list_handshakes_for_organization",
            Filter={"ActionType": "INVITE"},
        ):
            if handshake.get("State") not in OPEN_HANDSHAKE_STATES:
                continue
            for party in handshake.get("Parties", []):
                if party.get("Type") == "ACCOUNT" and party.get("Id") == account_id:
                    return handshake["Id"]
        return None

    def invite_account(self, account_id):
        """
        Invites the account to join the organization.

        Args:
            account_id (str): The account to invite.

        Returns:
            str: The handshake id of the invitation, or the
                ALREADY_JOINED_HANDSHAKE_ID sentinel when the account is a
                member of the organization already.
        """
        if self.is_member(account_id):
            LOGGER.info(
                "Account %s is already a member of the organization",
                account_id,
            )
            return ALREADY_JOINED_HANDSHAKE_ID
        try:
            response = self.client.invite_account_to_organization(
                Target={"Id": account_id, "Type": "ACCOUNT"},
            )
            return response["Handshake"]["Id"]
        except ClientError as error:
            if error_code(error) != DUPLICATE_HANDSHAKE_ERROR_CODE:
                raise
            handshake_id = self.find_open_handshake(account_id)
            if not handshake_id:
                raise
            LOGGER.info(
                "Reusing open invitation %s for account %s",
                handshake_id,
                account_id,
            )
            return handshake_id

    def accept_handshake(self, handshake_id):
        """
        Accepts the handshake. This client must act as the invited account.

        Returns:
            bool: True if the handshake was accepted by this call, False if
                the account already was in the desired state.
        """
        try:
            self.client.accept_handshake(HandshakeId=handshake_id)
            return True
        except ClientError as error:
            if is_already_member_error(error):
                LOGGER.info(
                    "Handshake %s needs no acceptance (%s)",
                    handshake_id,
                    error_code(error),
                )
                return False
            raise

    def list_create_account_status(self, states=None):
        """
        Yields the account creation requests of this organization,
        optionally limited to the given states.
        """
        kwargs = {"States": list(states)} if states else {}
        return self._paginate("list_create_account_status", **kwargs)

    def list_parents(self, child_id):
        return self.client.list_parents(ChildId=child_id).get("Parents")[0]

    def get_child_ou_id(self, parent_id, ou_name):
        for ou in self._paginate(
            "list_organizational_units_for_parent",
            ParentId=parent_id,
        ):
            if ou["Name"] == ou_name:
                return ou["Id"]
        raise OrganizationsException(
            f"Could not find OU named {ou_name} under {parent_id}",
        )

    def list_accounts_in_ou(self, ou_id):
        return list(self._paginate("list_accounts_for_parent", ParentId=ou_id))

    def move_account(self, account_id, destination_ou_id):
        source_parent_id = self.list_parents(account_id)["Id"]
        if source_parent_id == destination_ou_id:
            LOGGER.info(
                "Account %s already resides in %s",
                account_id,
                destination_ou_id,
            )
            return
        try:
            self.client.move_account(
                AccountId=account_id,
                SourceParentId=source_parent_id,
                DestinationParentId=destination_ou_id,
            )
        except ClientError as error:
            if error_code(error) != DUPLICATE_ACCOUNT_ERROR_CODE:
                raise
            LOGGER.info(
                "Account %s was moved to %s concurrently",
                account_id,
                destination_ou_id,
            )

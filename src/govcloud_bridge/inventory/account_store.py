# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
DynamoDB backed inventory of sandbox accounts, keyed by awsAccountId
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.exceptions import ClientError

from govcloud_bridge.shared.errors import (
    AccountAlreadyRegisteredError,
    LinkedAccountMismatchError,
)
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)
CONDITIONAL_CHECK_FAILED_ERROR_CODE = "ConditionalCheckFailedException"
SCHEMA_VERSION = 1


def _utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


@dataclass
class InventoryAccountRecord:
    aws_account_id: str
    status: str = "CleanUp"
    name: Optional[str] = None
    email: Optional[str] = None
    commercial_linked_account_id: Optional[str] = None
    created_time: str = field(default_factory=_utc_now_iso)
    last_edit_time: Optional[str] = None

    def to_item(self):
        item = {
            "awsAccountId": self.aws_account_id,
            "status": self.status,
            "meta": {
                "schemaVersion": SCHEMA_VERSION,
                "createdTime": self.created_time,
                "lastEditTime": self.last_edit_time or self.created_time,
            },
        }
        if self.name:
            item["name"] = self.name
        if self.email:
            item["email"] = self.email
        if self.commercial_linked_account_id:
            item["commercialLinkedAccountId"] = self.commercial_linked_account_id
        return item

    @classmethod
    def from_item(cls, item):
        meta = item.get("meta", {})
        return cls(
            aws_account_id=item["awsAccountId"],
            status=item.get("status", "CleanUp"),
            name=item.get("name"),
            email=item.get("email"),
            commercial_linked_account_id=item.get("commercialLinkedAccountId"),
            created_time=meta.get("createdTime") or _utc_now_iso(),
            last_edit_time=meta.get("lastEditTime"),
        )


class SandboxAccountStore:
    """
    Class used for modeling the sandbox account table
    """

    def __init__(self, table_name=None, table=None):
        if not table and not table_name:
            raise ValueError("Either a table_name or a table is required")
        self.table = table or boto3.resource("dynamodb").Table(table_name)

    def get(self, account_id):
        response = self.table.get_item(
            Key={"awsAccountId": account_id},
            ConsistentRead=True,
        )
        item = response.get("Item")
        return InventoryAccountRecord.from_item(item) if item else None

    def create(self, record):
        """
        Writes a new record. Never overwrites an existing one.

        Raises:
            AccountAlreadyRegisteredError: When a record with the same
                awsAccountId exists already.
        """
        try:
            self.table.put_item(
                Item=record.to_item(),
                ConditionExpression="attribute_not_exists(awsAccountId)",
            )
        except ClientError as error:
            if error.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED_ERROR_CODE:
                raise AccountAlreadyRegisteredError(
                    f"Account {record.aws_account_id} is already registered",
                ) from error
            raise
        LOGGER.info("Created inventory record for %s", record.aws_account_id)
        return record

    def link_commercial_account(self, account_id, commercial_account_id):
        """
        Sets commercialLinkedAccountId if it is unset. Linking the same pair
        again is a no-op, linking to a different commercial account fails.

        Raises:
            LinkedAccountMismatchError: When the account is linked to another
                commercial account already.
        """
        try:
            self.table.update_item(
                Key={"awsAccountId": account_id},
                UpdateExpression=(
                    "SET commercialLinkedAccountId = :commercial, "
                    "meta.lastEditTime = :now"
                ),
                ConditionExpression=(
                    "attribute_exists(awsAccountId) AND ("
                    "attribute_not_exists(commercialLinkedAccountId) OR "
                    "commercialLinkedAccountId = :commercial)"
                ),
                ExpressionAttributeValues={
                    ":commercial": commercial_account_id,
                    ":now": _utc_now_iso(),
                },
            )
        except ClientError as error:
            if error.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED_ERROR_CODE:
                raise LinkedAccountMismatchError(
                    f"Account {account_id} is missing or linked to a commercial "
                    f"account other than {commercial_account_id}",
                ) from error
            raise

    def find_all(self):
        scan_kwargs = {}
        while True:
            response = self.table.scan(**scan_kwargs)
            for item in response.get("Items", []):
                yield InventoryAccountRecord.from_item(item)
            if "LastEvaluatedKey" not in response:
                return
            scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

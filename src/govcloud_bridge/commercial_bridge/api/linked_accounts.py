# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Linked account directory of the commercial management account.

Every GovCloud account is created through a commercial account of the same
organization. The successful creation requests are the record of which
commercial account is linked to which GovCloud account.
"""

from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)

SUCCEEDED_STATE = "SUCCEEDED"


def _iso(timestamp):
    return timestamp.isoformat() if hasattr(timestamp, "isoformat") else timestamp


class LinkedAccountDirectory:
    def __init__(self, organizations):
        self.organizations = organizations

    def list_linked_accounts(self):
        """
        Returns:
            list(dict): requestId, govCloudAccountId, commercialAccountId,
                accountName and createTime of every created GovCloud account.
        """
        accounts = []
        for status in self.organizations.list_create_account_status(
                states=[SUCCEEDED_STATE]):
            if not status.get("GovCloudAccountId"):
                continue
            accounts.append({
                "requestId": status.get("Id"),
                "govCloudAccountId": status["GovCloudAccountId"],
                "commercialAccountId": status.get("AccountId"),
                "accountName": status.get("AccountName"),
                "createTime": _iso(
                    status.get("CompletedTimestamp")
                    or status.get("RequestedTimestamp")
                ),
            })
        LOGGER.debug("Found %d linked GovCloud accounts", len(accounts))
        return accounts

    def find_commercial_account_id(self, govcloud_account_id):
        """
        Returns the commercial account linked to the GovCloud account, or
        None when the organization never created it.
        """
        for account in self.list_linked_accounts():
            if account["govCloudAccountId"] == govcloud_account_id:
                return account["commercialAccountId"]
        return None

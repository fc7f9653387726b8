# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Cost reporting for GovCloud accounts through the commercial bridge.

GovCloud accounts have no Cost Explorer of their own, their usage is billed
to the linked commercial account. Every (account, region) pair is queried on
its own and failures only skip that pair, never the batch.
"""

from govcloud_bridge.commercial_bridge.exceptions import AccountMappingNotFoundError
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)
SUPPORTED_GRANULARITIES = ("DAILY", "MONTHLY")


class AccountsCostReport:
    def __init__(self):
        self._costs = {}

    def add_cost(self, account_id, cost):
        self._costs[account_id] = self._costs.get(account_id, 0.0) + float(cost)

    def get_cost(self, account_id):
        return self._costs.get(account_id, 0.0)

    def has_account(self, account_id):
        return account_id in self._costs

    def total_cost(self):
        return sum(self._costs.values())

    def as_dict(self):
        return dict(self._costs)


class CommercialBridgeCostService:
    """
    Class used for aggregating GovCloud account costs from the commercial
    partition
    """

    def __init__(self, client, govcloud_regions, account_store):
        self.client = client
        self.govcloud_regions = list(govcloud_regions)
        self.account_store = account_store

    def _commercial_account_id(self, govcloud_account_id):
        try:
            record = self.account_store.get(govcloud_account_id)
        except Exception as error:  # pylint: disable=broad-except
            LOGGER.warning(
                "Error retrieving account %s: %s",
                govcloud_account_id,
                error,
            )
            return None
        return record.commercial_linked_account_id if record else None

    def _collect(self, report, govcloud_account_id, start, end, granularity):
        commercial_account_id = self._commercial_account_id(govcloud_account_id)
        for region in self.govcloud_regions:
            try:
                response = self.client.query_cost(
                    govcloud_account_id,
                    start,
                    end,
                    is_govcloud_account_id=True,
                    commercial_account_id=commercial_account_id,
                    granularity=granularity,
                    region=region,
                )
                report.add_cost(govcloud_account_id, response.get("totalCost", 0))
            except AccountMappingNotFoundError:
                LOGGER.warning(
                    "No commercial account mapping found for GovCloud account "
                    "%s in %s. Skipping cost polling for this account. To "
                    "enable cost tracking, add the commercialLinkedAccountId "
                    "to the account record.",
                    govcloud_account_id,
                    region,
                )
                continue
            except Exception as error:  # pylint: disable=broad-except
                LOGGER.error(
                    "Failed to get costs for account %s in %s: %s",
                    govcloud_account_id,
                    region,
                    error,
                )
                continue
            LOGGER.debug(
                "Cost retrieved for account %s in %s: %s (commercial account %s)",
                govcloud_account_id,
                region,
                response.get("totalCost"),
                response.get("commercialAccountId"),
            )

    def get_cost_for_leases(self, accounts_with_start_dates, end, granularity="DAILY"):
        """
        Args:
            accounts_with_start_dates (dict(str, date)): GovCloud account id
                to the start of its lease.
            end (date): End of the reporting window.
            granularity (str): DAILY, MONTHLY or HOURLY. The bridge has no
                hourly data, so HOURLY is downgraded to DAILY.

        Returns:
            AccountsCostReport: Costs summed over all regions per account.
                Accounts without any successful query are absent.
        """
        if granularity not in SUPPORTED_GRANULARITIES:
            granularity = "DAILY"
        LOGGER.info(
            "Querying costs for %d accounts via commercial bridge",
            len(accounts_with_start_dates),
        )
        report = AccountsCostReport()
        for govcloud_account_id, start in accounts_with_start_dates.items():
            self._collect(report, govcloud_account_id, start, end, granularity)
        return report

    def get_cost_for_range(self, start, end, accounts_with_start_dates, tag=None):
        """
        Same as get_cost_for_leases, but over one window for every account.
        Tag filtering is not available through the bridge: when a tag is
        requested it is ignored and a warning is logged.
        """
        if tag:
            LOGGER.warning(
                "Tag filtering on %s requested but not supported via the "
                "commercial bridge API. Returning unfiltered costs.",
                tag.get("tagName"),
            )
        LOGGER.info(
            "Querying cost range %s to %s for %d accounts via commercial bridge",
            start,
            end,
            len(accounts_with_start_dates),
        )
        report = AccountsCostReport()
        for govcloud_account_id in accounts_with_start_dates:
            self._collect(report, govcloud_account_id, start, end, "DAILY")
        return report

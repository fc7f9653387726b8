# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Errors raised by the commercial bridge client
"""


class CommercialBridgeError(Exception):
    """Base class for commercial bridge errors"""


class BridgeApiError(CommercialBridgeError):
    """
    The commercial bridge API answered with a non-2xx status code.
    Carries the status code and the raw response body for diagnosis.
    """

    def __init__(self, message, status_code, body):
        super().__init__(f"{message}: {status_code} {body}")
        self.status_code = status_code
        self.body = body


class AccountMappingNotFoundError(CommercialBridgeError):
    """
    The commercial bridge does not know the commercial account linked to
    the GovCloud account yet. Expected for accounts pending manual linkage,
    callers are expected to skip the account and continue.
    """

    def __init__(self, linked_account_id):
        super().__init__(
            "No commercial account mapping found for GovCloud account "
            f"{linked_account_id}",
        )
        self.linked_account_id = linked_account_id


class CredentialExchangeError(CommercialBridgeError):
    """
    The IAM Roles Anywhere signing helper failed to exchange the client
    certificate for temporary credentials
    """

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
HTTP client for the commercial bridge API.

Supports two mutually exclusive authentication modes:
1. API Key (legacy) - a shared secret kept in Secrets Manager, sent as the
   x-api-key header.
2. IAM Roles Anywhere (recommended) - temporary credentials derived from a
   client certificate, used to SigV4 sign every request.
"""

import json
import re
import urllib.error
import urllib.parse
import urllib.request

import boto3

from govcloud_bridge.commercial_bridge.credentials import (
    DEFAULT_SIGNING_HELPER,
    RolesAnywhereCredentialProvider,
    get_secret_string,
    sign_request,
)
from govcloud_bridge.commercial_bridge.exceptions import (
    AccountMappingNotFoundError,
    BridgeApiError,
)
from govcloud_bridge.shared.cache import Cache
from govcloud_bridge.shared.errors import InvalidConfigError
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)

API_KEY_HEADER = "x-api-key"
DEFAULT_COMMERCIAL_REGION = "us-east-1"
DEFAULT_ROLE_NAME = "OrganizationAccountAccessRole"
REQUEST_TIMEOUT_SECONDS = 30
EXECUTE_API_HOST_REGEX = re.compile(r"\.execute-api\.([a-z0-9-]+)\.amazonaws\.com")


def region_from_api_url(api_url):
    match = EXECUTE_API_HOST_REGEX.search(urllib.parse.urlparse(api_url).netloc)
    return match.group(1) if match else DEFAULT_COMMERCIAL_REGION


def _format_date(value):
    return value.strftime("%Y-%m-%d") if hasattr(value, "strftime") else value


class CommercialBridgeClient:
    """
    Class used for calling the commercial bridge API from GovCloud
    """

    def __init__(
        self,
        api_url,
        api_key_secret_arn=None,
        roles_anywhere=None,
        secrets_client=None,
        cache=None,
        region=None,
        signing_helper_path=DEFAULT_SIGNING_HELPER,
        credential_provider=None,
        urlopen=urllib.request.urlopen,
    ):
        if not api_url:
            raise InvalidConfigError("The commercial bridge API URL is required")
        if bool(api_key_secret_arn) == bool(roles_anywhere):
            raise InvalidConfigError(
                "CommercialBridgeClient requires either an API key secret or "
                "an IAM Roles Anywhere configuration, not both",
            )
        self.api_url = api_url.rstrip("/")
        self.api_key_secret_arn = api_key_secret_arn
        self.region = region or region_from_api_url(api_url)
        self.secrets_client = secrets_client or boto3.client("secretsmanager")
        self.cache = cache if cache is not None else Cache()
        self.credential_provider = None
        if roles_anywhere:
            self.credential_provider = credential_provider or RolesAnywhereCredentialProvider(
                roles_anywhere,
                self.secrets_client,
                self.cache,
                signing_helper_path=signing_helper_path,
            )
        self._urlopen = urlopen

    def _get_api_key(self):
        cache_key = f"api-key:{self.api_key_secret_arn}"
        api_key = self.cache.get(cache_key)
        if api_key is None:
            LOGGER.debug(
                "Retrieving commercial bridge API key from Secrets Manager: %s",
                self.api_key_secret_arn,
            )
            api_key = get_secret_string(self.secrets_client, self.api_key_secret_arn)
            self.cache.add(cache_key, api_key)
        return api_key

    def _auth_headers(self, method, url, data, headers):
        if self.credential_provider is None:
            return {**headers, API_KEY_HEADER: self._get_api_key()}
        return sign_request(
            self.credential_provider.get_credentials(),
            self.region,
            method,
            url,
            body=data,
            headers=headers,
        )

    def _request(
        self,
        method,
        path,
        body=None,
        error_message="Request failed",
        not_found_error=None,
    ):
        url = f"{self.api_url}{path}"
        data = json.dumps(body).encode("utf-8") if body is not None else None
        headers = {"Content-Type": "application/json"} if data is not None else {}
        request = urllib.request.Request(
            url,
            data=data,
            headers=self._auth_headers(method, url, data, headers),
            method=method,
        )
        try:
            with self._urlopen(request, timeout=REQUEST_TIMEOUT_SECONDS) as response:
                return json.loads(response.read() or b"{}")
        except urllib.error.HTTPError as error:
            error_body = error.read().decode("utf-8", errors="replace")
            if error.code == 404 and not_found_error is not None:
                LOGGER.warning("Commercial bridge returned 404 on %s %s", method, path)
                raise not_found_error from error
            LOGGER.error(
                "Commercial bridge API error on %s %s: %s %s",
                method,
                path,
                error.code,
                error_body,
            )
            raise BridgeApiError(error_message, error.code, error_body) from error

    def query_cost(
        self,
        linked_account_id,
        start_date,
        end_date,
        is_govcloud_account_id=True,
        commercial_account_id=None,
        granularity="DAILY",
        region=None,
    ):
        """
        Queries Cost Explorer in the commercial partition for the account.

        Raises:
            AccountMappingNotFoundError: When the bridge answers 404, meaning
                no commercial account is linked to the GovCloud account yet.
        """
        LOGGER.debug(
            "Querying commercial bridge cost API for %s in %s",
            linked_account_id,
            region,
        )
        body = {
            "linkedAccountId": linked_account_id,
            "isGovCloudAccountId": is_govcloud_account_id,
            "startDate": _format_date(start_date),
            "endDate": _format_date(end_date),
            "granularity": granularity,
        }
        if commercial_account_id:
            body["commercialAccountId"] = commercial_account_id
        if region:
            body["region"] = region
        return self._request(
            "POST",
            "/cost-info",
            body,
            error_message="Commercial bridge cost request failed",
            not_found_error=AccountMappingNotFoundError(linked_account_id),
        )

    def create_account(self, account_name, email, role_name=DEFAULT_ROLE_NAME):
        LOGGER.info(
            "Creating new GovCloud account %s via commercial bridge",
            account_name,
        )
        return self._request(
            "POST",
            "/govcloud-accounts",
            {"accountName": account_name, "email": email, "roleName": role_name},
            error_message="Failed to create GovCloud account",
        )

    def list_accounts(self):
        """
        Lists the GovCloud accounts known to the commercial bridge. Accounts
        without a confirmed commercial account id are left out.
        """
        response = self._request(
            "GET",
            "/govcloud-accounts",
            error_message="Failed to list GovCloud accounts",
        )
        return [
            account for account in response.get("accounts", [])
            if account.get("govCloudAccountId") and account.get("commercialAccountId")
        ]

    def get_account_status(self, request_id):
        LOGGER.debug("Checking GovCloud account creation status of %s", request_id)
        return self._request(
            "GET",
            f"/govcloud-accounts/{urllib.parse.quote(request_id, safe='')}",
            error_message="Failed to get account status",
        )

    def accept_invitation(
        self,
        govcloud_account_id,
        handshake_id,
        govcloud_region,
        commercial_linked_account_id,
    ):
        LOGGER.info(
            "Requesting commercial bridge to accept invitation %s for %s",
            handshake_id,
            govcloud_account_id,
        )
        return self._request(
            "POST",
            "/govcloud-accounts/accept-invitation",
            {
                "govCloudAccountId": govcloud_account_id,
                "handshakeId": handshake_id,
                "govCloudRegion": govcloud_region,
                "commercialLinkedAccountId": commercial_linked_account_id,
            },
            error_message="Failed to accept invitation",
        )

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
IAM Roles Anywhere credentials for the commercial bridge.

The client certificate and private key live in Secrets Manager as
{"cert": <base64 PEM>, "key": <base64 PEM>}. They are written to a private
temporary directory only while the signing helper runs, and the directory is
removed again on both the success and the failure path.
"""

import base64
import json
import os
import subprocess
import tempfile
from dataclasses import dataclass

from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials
from botocore.utils import parse_timestamp

from govcloud_bridge.commercial_bridge.exceptions import (
    CommercialBridgeError,
    CredentialExchangeError,
)
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)

DEFAULT_SIGNING_HELPER = "/opt/bin/aws_signing_helper"
SIGNING_HELPER_TIMEOUT_SECONDS = 60
SIGNING_SERVICE_NAME = "execute-api"


@dataclass(frozen=True)
class RolesAnywhereConfig:
    client_cert_secret_arn: str
    trust_anchor_arn: str
    profile_arn: str
    role_arn: str

    @property
    def cache_key(self):
        return f"roles-anywhere:{self.trust_anchor_arn}:{self.profile_arn}:{self.role_arn}"


def get_secret_string(secrets_client, secret_arn):
    response = secrets_client.get_secret_value(SecretId=secret_arn)
    secret_string = response.get("SecretString")
    if not secret_string:
        raise CommercialBridgeError(
            f"Failed to retrieve secret from Secrets Manager: {secret_arn}",
        )
    return secret_string


def _write_private_file(path, content):
    file_descriptor = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(file_descriptor, "wb") as file_pointer:
        file_pointer.write(content)


class RolesAnywhereCredentialProvider:
    """
    Exchanges the client certificate for temporary credentials through the
    aws_signing_helper binary and keeps them in the injected cache until they
    are about to expire.
    """

    def __init__(
        self,
        config,
        secrets_client,
        cache,
        signing_helper_path=DEFAULT_SIGNING_HELPER,
        runner=subprocess.run,
    ):
        self.config = config
        self.secrets_client = secrets_client
        self.cache = cache
        self.signing_helper_path = signing_helper_path
        self._run = runner

    def get_credentials(self):
        credentials = self.cache.get(self.config.cache_key)
        if credentials is not None:
            return credentials

        LOGGER.info(
            "Refreshing IAM Roles Anywhere credentials for %s",
            self.config.role_arn,
        )
        certificate, private_key = self._fetch_certificate()
        bundle = self._exchange(certificate, private_key)
        credentials = Credentials(
            access_key=bundle["AccessKeyId"],
            secret_key=bundle["SecretAccessKey"],
            token=bundle.get("SessionToken"),
        )
        self.cache.add(
            self.config.cache_key,
            credentials,
            expiration=parse_timestamp(bundle["Expiration"]),
        )
        return credentials

    def _fetch_certificate(self):
        LOGGER.debug(
            "Retrieving client certificate from %s",
            self.config.client_cert_secret_arn,
        )
        secret = json.loads(
            get_secret_string(self.secrets_client, self.config.client_cert_secret_arn)
        )
        try:
            return (
                base64.b64decode(secret["cert"]),
                base64.b64decode(secret["key"]),
            )
        except (KeyError, ValueError) as error:
            raise CommercialBridgeError(
                "Client certificate secret must hold base64 encoded "
                "'cert' and 'key' values",
            ) from error

    def _exchange(self, certificate, private_key):
        with tempfile.TemporaryDirectory(prefix="roles-anywhere-") as workdir:
            certificate_path = os.path.join(workdir, "client.pem")
            private_key_path = os.path.join(workdir, "client.key")
            _write_private_file(certificate_path, certificate)
            _write_private_file(private_key_path, private_key)
            command = [
                self.signing_helper_path,
                "credential-process",
                "--certificate", certificate_path,
                "--private-key", private_key_path,
                "--trust-anchor-arn", self.config.trust_anchor_arn,
                "--profile-arn", self.config.profile_arn,
                "--role-arn", self.config.role_arn,
            ]
            try:
                completed = self._run(
                    command,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=SIGNING_HELPER_TIMEOUT_SECONDS,
                )
            except (OSError, subprocess.TimeoutExpired) as error:
                raise CredentialExchangeError(
                    f"Failed to run the signing helper: {error}",
                ) from error

        if completed.returncode != 0:
            raise CredentialExchangeError(
                f"Signing helper exited with {completed.returncode}: "
                f"{completed.stderr.strip()}",
            )
        try:
            bundle = json.loads(completed.stdout)
        except ValueError as error:
            raise CredentialExchangeError(
                "Signing helper returned malformed credentials",
            ) from error
        missing = [
            key for key in ("AccessKeyId", "SecretAccessKey", "Expiration")
            if not bundle.get(key)
        ]
        if missing:
            raise CredentialExchangeError(
                f"Signing helper response misses {', '.join(missing)}",
            )
        return bundle


def sign_request(credentials, region, method, url, body=None, headers=None):
    """
    Computes the SigV4 headers for a single request. Signatures are never
    reused, only the credentials behind them are cached.

    Returns:
        dict: The headers to send, including Authorization and X-Amz-Date.
    """
    request = AWSRequest(
        method=method,
        url=url,
        data=body,
        headers=dict(headers or {}),
    )
    SigV4Auth(credentials, SIGNING_SERVICE_NAME, region).add_auth(request)
    return dict(request.headers.items())

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

import pytest
from mock import Mock

from govcloud_bridge.commercial_bridge.factory import create_commercial_bridge_client
from govcloud_bridge.shared.cache import Cache
from govcloud_bridge.shared.errors import InvalidConfigError

API_URL = 'https://abc123.execute-api.us-east-1.amazonaws.com/prod'
ROLES_ANYWHERE_ENV = {
    'COMMERCIAL_BRIDGE_API_URL': API_URL,
    'COMMERCIAL_BRIDGE_CLIENT_CERT_SECRET_ARN': 'arn:cert',
    'COMMERCIAL_BRIDGE_TRUST_ANCHOR_ARN': 'arn:anchor',
    'COMMERCIAL_BRIDGE_PROFILE_ARN': 'arn:profile',
    'COMMERCIAL_BRIDGE_ROLE_ARN': 'arn:role',
}


def test_api_key_mode():
    client = create_commercial_bridge_client(
        {
            'COMMERCIAL_BRIDGE_API_URL': API_URL,
            'COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN': 'arn:api-key',
        },
        secrets_client=Mock(),
    )
    assert client.api_key_secret_arn == 'arn:api-key'
    assert client.credential_provider is None
    assert client.region == 'us-east-1'


def test_roles_anywhere_mode_shares_injected_cache():
    cache = Cache()
    client = create_commercial_bridge_client(
        ROLES_ANYWHERE_ENV,
        cache=cache,
        secrets_client=Mock(),
    )
    provider = client.credential_provider
    assert provider.cache is cache
    assert provider.config.role_arn == 'arn:role'
    assert provider.signing_helper_path == '/opt/bin/aws_signing_helper'


def test_explicit_region_wins():
    client = create_commercial_bridge_client(
        {**ROLES_ANYWHERE_ENV, 'COMMERCIAL_BRIDGE_REGION': 'us-west-2'},
        secrets_client=Mock(),
    )
    assert client.region == 'us-west-2'


def test_neither_mode():
    with pytest.raises(InvalidConfigError):
        create_commercial_bridge_client(
            {'COMMERCIAL_BRIDGE_API_URL': API_URL},
            secrets_client=Mock(),
        )


def test_both_modes():
    with pytest.raises(InvalidConfigError):
        create_commercial_bridge_client(
            {**ROLES_ANYWHERE_ENV, 'COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN': 'arn:api-key'},
            secrets_client=Mock(),
        )


def test_partial_roles_anywhere_configuration():
    env = dict(ROLES_ANYWHERE_ENV)
    del env['COMMERCIAL_BRIDGE_PROFILE_ARN']
    with pytest.raises(InvalidConfigError) as error:
        create_commercial_bridge_client(env, secrets_client=Mock())
    assert 'COMMERCIAL_BRIDGE_PROFILE_ARN' in str(error.value)


def test_missing_api_url():
    with pytest.raises(InvalidConfigError):
        create_commercial_bridge_client(
            {'COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN': 'arn:api-key'},
            secrets_client=Mock(),
        )

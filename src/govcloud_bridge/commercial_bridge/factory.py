# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Creates a CommercialBridgeClient with the authentication mode configured
in the environment
"""

from govcloud_bridge.commercial_bridge.client import CommercialBridgeClient
from govcloud_bridge.commercial_bridge.credentials import RolesAnywhereConfig
from govcloud_bridge.shared.environment import (
    COMMERCIAL_BRIDGE_ENVIRONMENT,
    ROLES_ANYWHERE_VARIABLES,
    load_environment,
)
from govcloud_bridge.shared.errors import InvalidConfigError
from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)


def create_commercial_bridge_client(env=None, cache=None, secrets_client=None):
    """
    Create a CommercialBridgeClient for the environment.

    Exactly one mode has to be configured: either
    COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN, or all four IAM Roles Anywhere
    variables.

    Args:
        env (dict|None): Environment variables, defaults to os.environ.
        cache (Cache|None): Process-local cache shared between invocations.
        secrets_client: Optional Secrets Manager client.

    Raises:
        InvalidConfigError: When neither or both modes are configured, or
            when only some of the IAM Roles Anywhere variables are set.
    """
    config = load_environment(COMMERCIAL_BRIDGE_ENVIRONMENT, env=env)
    roles_anywhere_values = [config.get(name) for name in ROLES_ANYWHERE_VARIABLES]
    has_roles_anywhere = all(roles_anywhere_values)
    has_api_key = bool(config.get("COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN"))

    if any(roles_anywhere_values) and not has_roles_anywhere:
        missing = [
            name for name, value in zip(ROLES_ANYWHERE_VARIABLES, roles_anywhere_values)
            if not value
        ]
        raise InvalidConfigError(
            "Incomplete IAM Roles Anywhere configuration, missing: "
            f"{', '.join(missing)}",
        )
    if has_api_key and has_roles_anywhere:
        raise InvalidConfigError(
            "Configure either API key or IAM Roles Anywhere authentication "
            "for the commercial bridge, not both",
        )
    if not has_api_key and not has_roles_anywhere:
        raise InvalidConfigError(
            "CommercialBridgeClient requires either API Key or "
            "IAM Roles Anywhere configuration",
        )

    roles_anywhere = None
    if has_roles_anywhere:
        LOGGER.debug("Using IAM Roles Anywhere for the commercial bridge")
        roles_anywhere = RolesAnywhereConfig(*roles_anywhere_values)

    return CommercialBridgeClient(
        config["COMMERCIAL_BRIDGE_API_URL"],
        api_key_secret_arn=config.get("COMMERCIAL_BRIDGE_API_KEY_SECRET_ARN"),
        roles_anywhere=roles_anywhere,
        secrets_client=secrets_client,
        cache=cache,
        region=config.get("COMMERCIAL_BRIDGE_REGION"),
        signing_helper_path=config["ROLES_ANYWHERE_SIGNING_HELPER"],
    )

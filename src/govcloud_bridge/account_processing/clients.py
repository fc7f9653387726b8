# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Builds the AWS clients the step executors need from the Lambda environment
"""

from govcloud_bridge.commercial_bridge.factory import create_commercial_bridge_client
from govcloud_bridge.shared.cache import Cache
from govcloud_bridge.shared.organizations import Organizations
from govcloud_bridge.shared.partition import get_partition
from govcloud_bridge.shared.sts import STS

# Lives as long as the Lambda execution environment, shared by invocations
BRIDGE_CACHE = Cache()


def commercial_bridge_client(env=None):
    return create_commercial_bridge_client(env, cache=BRIDGE_CACHE)


def org_management_session(env, role_session_name):
    """
    Reaches the organization management account through the intermediate
    role of the hub account.
    """
    sts = STS(region_name=env["GOVCLOUD_REGION"])
    return sts.assume_role_chain(
        [env["INTERMEDIATE_ROLE_ARN"], env["ORG_MGT_ROLE_ARN"]],
        role_session_name,
    )


def org_management_organizations(env, role_session_name):
    return Organizations(
        session=org_management_session(env, role_session_name),
        region_name=env["GOVCLOUD_REGION"],
    )


def member_account_organizations(env, account_id, role_session_name):
    """
    Organizations client that acts as the member account itself, through
    the organization access role created with the account.
    """
    management_session = org_management_session(env, role_session_name)
    member_session = STS(
        management_session.client("sts"),
        region_name=env["GOVCLOUD_REGION"],
    ).assume_account_role(
        get_partition(env["GOVCLOUD_REGION"]),
        account_id,
        env["TARGET_ACCOUNT_ROLE_NAME"],
        role_session_name,
    )
    return Organizations(session=member_session, region_name=env["GOVCLOUD_REGION"])

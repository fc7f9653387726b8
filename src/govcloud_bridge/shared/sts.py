# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""STS module used to reach the organization management account and
freshly joined GovCloud accounts
"""

import boto3
from govcloud_bridge.shared.logger import configure_logger
from govcloud_bridge.shared.partition import build_role_arn

LOGGER = configure_logger(__name__)


class STS:
    """Class used for modeling STS
    """

    def __init__(self, client=None, region_name=None):
        self.region_name = region_name
        self.client = client or boto3.client('sts', region_name=region_name)

    def assume_cross_account_role(self, role_arn, role_session_name):
        """Assumes a role in another account and returns a session that
        uses the temporary credentials
        """
        LOGGER.debug(
            "Assuming into %s with session name: %s",
            role_arn,
            role_session_name,
        )

        sts_response = self.client.assume_role(
            RoleArn=role_arn, RoleSessionName=role_session_name
        )
        LOGGER.info(
            "Assumed into %s with session name: %s",
            role_arn,
            role_session_name,
        )

        return boto3.Session(
            aws_access_key_id=sts_response['Credentials']['AccessKeyId'],
            aws_secret_access_key=sts_response['Credentials']['SecretAccessKey'],
            aws_session_token=sts_response['Credentials']['SessionToken'],
            region_name=self.region_name,
        )

    def assume_role_chain(self, role_arns, role_session_name):
        """
        Assumes each role in turn, using the credentials of the previous
        hop for the next one. The hub account reaches the organization
        management account through an intermediate role this way.

        Args:
            role_arns (list(str)): The roles to assume, in order.
            role_session_name (str): The session name used on every hop.

        Returns:
            boto3.Session: A session holding the credentials of the last role.
        """
        if not role_arns:
            raise ValueError("At least one role ARN is required")
        sts = self
        session = None
        for role_arn in role_arns:
            session = sts.assume_cross_account_role(role_arn, role_session_name)
            sts = STS(session.client('sts'), region_name=self.region_name)
        return session

    def assume_account_role(
        self,
        partition,
        account_id,
        role_name,
        role_session_name,
    ):
        """
        Assumes the organization access role inside a member account,
        for example to accept a handshake on behalf of that account.
        """
        return self.assume_cross_account_role(
            build_role_arn(partition, account_id, role_name),
            role_session_name,
        )

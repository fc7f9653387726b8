# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""Partition.

A partition is a group of AWS Regions. The commercial bridge spans two of
them: the commercial partition (aws) and GovCloud (aws-us-gov). This module
resolves the partition of a region and builds ARNs in the right partition.
"""

from boto3.session import Session
from botocore.exceptions import UnknownRegionError

GOVCLOUD_PARTITION = "aws-us-gov"
DEFAULT_GOVCLOUD_REGION = "us-gov-west-1"


class IncompatibleRegionError(Exception):
    """Raised in case the regions is not supported."""


def get_partition(region_name: str) -> str:
    """Given the region, this function will return the appropriate partition.

    :param region_name: The name of the region (us-east-1, us-gov-west-1)
    :raises IncompatibleRegionError: If the provided region is not supported.
    :return: Returns the partition name as a string.
    """
    try:
        return Session().get_partition_for_region(region_name)
    except UnknownRegionError as error:
        raise IncompatibleRegionError(
            f'The region {region_name} is not supported.'
        ) from error


def is_govcloud_region(region_name: str) -> bool:
    return get_partition(region_name) == GOVCLOUD_PARTITION


def build_role_arn(partition: str, account_id: str, role_name: str) -> str:
    return f"arn:{partition}:iam::{account_id}:role/{role_name}"

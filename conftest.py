# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

import os

from aws_xray_sdk import global_sdk_config

os.environ.setdefault("AWS_DEFAULT_REGION", "us-gov-west-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

global_sdk_config.set_sdk_enabled(False)

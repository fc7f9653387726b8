# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Step executors of the GovCloud account workflow. Every module is deployed
as its own narrowly permissioned Lambda function and is safe to re-invoke.
"""

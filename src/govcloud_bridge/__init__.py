# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Provisions AWS GovCloud accounts and links them to the sandbox organization.
"""

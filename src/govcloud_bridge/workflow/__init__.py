# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Checkpointed state machine that sequences the account processing steps
into the create and join-existing flows.
"""

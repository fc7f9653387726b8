# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Client side of the commercial bridge, the authenticated HTTP channel from
the GovCloud partition to the commercial partition's account API.
"""

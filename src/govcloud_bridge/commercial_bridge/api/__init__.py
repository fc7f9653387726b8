# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Server side of the commercial bridge. These Lambda functions run in the
commercial partition behind API Gateway and answer the requests sent by
CommercialBridgeClient from GovCloud.
"""

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

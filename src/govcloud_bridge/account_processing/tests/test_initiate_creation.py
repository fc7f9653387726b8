# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Tests the account creation steps
"""

import unittest

from aws_xray_sdk import global_sdk_config
from mock import Mock

from govcloud_bridge.account_processing.check_status import check_status
from govcloud_bridge.account_processing.initiate_creation import initiate_creation
from govcloud_bridge.shared.errors import ValidationError

global_sdk_config.set_sdk_enabled(False)


class InitiateCreationTestCase(unittest.TestCase):
    def test_initiate_creation(self):
        bridge_client = Mock()
        bridge_client.create_account.return_value = {
            "requestId": "car-123",
            "status": "IN_PROGRESS",
        }

        response = initiate_creation(
            {"accountName": "Test-Acct", "email": "user@example.com"},
            bridge_client,
        )

        self.assertDictEqual(response, {
            "requestId": "car-123",
            "status": "IN_PROGRESS",
            "accountName": "Test-Acct",
            "email": "user@example.com",
        })
        bridge_client.create_account.assert_called_once_with(
            "Test-Acct",
            "user@example.com",
        )

    def test_invalid_input_has_no_side_effect(self):
        bridge_client = Mock()
        with self.assertRaises(ValidationError):
            initiate_creation({"accountName": "", "email": "user@example.com"}, bridge_client)
        with self.assertRaises(ValidationError):
            initiate_creation({"accountName": "x" * 51, "email": "user@example.com"}, bridge_client)
        bridge_client.create_account.assert_not_called()


class CheckStatusTestCase(unittest.TestCase):
    def test_in_progress(self):
        bridge_client = Mock()
        bridge_client.get_account_status.return_value = {
            "requestId": "car-123",
            "status": "IN_PROGRESS",
        }
        response = check_status(
            {"requestId": "car-123", "accountName": "Test-Acct", "email": "user@example.com"},
            bridge_client,
        )
        self.assertEqual(response["status"], "IN_PROGRESS")
        self.assertIsNone(response["govCloudAccountId"])
        self.assertEqual(response["accountName"], "Test-Acct")

    def test_succeeded(self):
        bridge_client = Mock()
        bridge_client.get_account_status.return_value = {
            "requestId": "car-123",
            "status": "SUCCEEDED",
            "govCloudAccountId": "111111111111",
            "commercialAccountId": "222222222222",
        }
        response = check_status({"requestId": "car-123"}, bridge_client)
        self.assertEqual(response["govCloudAccountId"], "111111111111")
        self.assertEqual(response["commercialAccountId"], "222222222222")

    def test_failed_carries_message(self):
        bridge_client = Mock()
        bridge_client.get_account_status.return_value = {
            "requestId": "car-123",
            "status": "FAILED",
            "message": "quota exceeded",
        }
        response = check_status({"requestId": "car-123"}, bridge_client)
        self.assertEqual(response["status"], "FAILED")
        self.assertEqual(response["message"], "quota exceeded")

    def test_request_id_required(self):
        with self.assertRaises(ValidationError):
            check_status({}, Mock())

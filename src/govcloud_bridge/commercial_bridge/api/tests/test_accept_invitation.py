# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Tests the accept invitation function of the commercial bridge
"""

import json
import unittest

import boto3
from aws_xray_sdk import global_sdk_config
from botocore.stub import Stubber
from mock import Mock

from govcloud_bridge.commercial_bridge.api.accept_invitation import (
    govcloud_organizations,
    handle_request,
)
from govcloud_bridge.shared.organizations import Organizations

global_sdk_config.set_sdk_enabled(False)

REQUEST = {
    "govCloudAccountId": "111111111111",
    "handshakeId": "h-123",
    "govCloudRegion": "us-gov-west-1",
    "commercialLinkedAccountId": "222222222222",
}
CREDENTIALS = {
    "Credentials": {
        "AccessKeyId": "ASIAEXAMPLE",
        "SecretAccessKey": "secret",
        "SessionToken": "token",
    },
}


class GovCloudOrganizationsTestCase(unittest.TestCase):
    def test_role_chain_through_commercial_account(self):
        sts = Mock()
        linked_sts_client = Mock()
        linked_sts_client.assume_role.return_value = CREDENTIALS
        sts.assume_cross_account_role.return_value.client.return_value = linked_sts_client

        organizations = govcloud_organizations(REQUEST, sts, "OrganizationAccountAccessRole")

        sts.assume_cross_account_role.assert_called_once_with(
            "arn:aws:iam::222222222222:role/OrganizationAccountAccessRole",
            "BridgeToGovCloud",
        )
        linked_sts_client.assume_role.assert_called_once_with(
            RoleArn="arn:aws-us-gov:iam::111111111111:role/OrganizationAccountAccessRole",
            RoleSessionName="AcceptOrgInvitation",
        )
        self.assertEqual(organizations.client.meta.region_name, "us-gov-west-1")


class HandleRequestTestCase(unittest.TestCase):
    def setUp(self):
        self.client = boto3.client("organizations", region_name="us-gov-west-1")
        self.stubber = Stubber(self.client)
        self.organizations_for_request = Mock(
            return_value=Organizations(org_client=self.client),
        )

    def _handle(self, body):
        event = {"body": json.dumps(body)} if body is not None else {}
        with self.stubber:
            response = handle_request(event, self.organizations_for_request)
            self.stubber.assert_no_pending_responses()
        return response["statusCode"], json.loads(response["body"])

    def test_accepts_handshake(self):
        self.stubber.add_response(
            "accept_handshake",
            {"Handshake": {"Id": "h-123", "State": "ACCEPTED"}},
            {"HandshakeId": "h-123"},
        )
        status_code, body = self._handle(REQUEST)

        self.assertEqual(status_code, 200)
        self.assertDictEqual(body, {
            "status": "ACCEPTED",
            "handshakeId": "h-123",
            "govCloudAccountId": "111111111111",
            "handshakeState": "ACCEPTED",
        })
        self.organizations_for_request.assert_called_once_with(REQUEST)

    def test_handshake_accepted_before(self):
        self.stubber.add_client_error(
            "accept_handshake",
            service_error_code="HandshakeAlreadyInStateException",
        )
        status_code, body = self._handle(REQUEST)
        self.assertEqual(status_code, 200)
        self.assertEqual(body["status"], "ACCEPTED")
        self.assertNotIn("handshakeState", body)

    def test_other_errors_fail_the_request(self):
        self.stubber.add_client_error(
            "accept_handshake",
            service_error_code="AccessDeniedException",
            service_message="Not allowed",
        )
        status_code, body = self._handle(REQUEST)
        self.assertEqual(status_code, 500)
        self.assertEqual(body["error"], "Failed to accept invitation")

    def test_invalid_requests(self):
        for body in (
                None,
                {**REQUEST, "handshakeId": ""},
                {key: value for key, value in REQUEST.items() if key != "govCloudRegion"},
                {**REQUEST, "commercialLinkedAccountId": "2222"},
        ):
            status_code, _ = self._handle(body)
            self.assertEqual(status_code, 400, body)
        self.organizations_for_request.assert_not_called()

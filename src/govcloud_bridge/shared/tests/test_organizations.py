# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

import boto3
from botocore.exceptions import ClientError
from botocore.stub import Stubber
from mock import Mock
from pytest import fixture, raises

from govcloud_bridge.shared.organizations import (
    ALREADY_JOINED_HANDSHAKE_ID,
    Organizations,
    OrganizationsException,
    is_already_member_error,
)


def _client_error(code, reason=None, operation_name='test'):
    response = {'Error': {'Code': code, 'Message': 'Test Message'}}
    if reason:
        response['Reason'] = reason
    return ClientError(error_response=response, operation_name=operation_name)


@fixture
def org_client():
    return Mock()


@fixture
def cls(org_client):
    return Organizations(org_client=org_client)


def test_requires_session_or_client():
    with raises(OrganizationsException):
        Organizations()


def test_describe_account_not_found(cls, org_client):
    org_client.describe_account.side_effect = _client_error('AccountNotFoundException')
    assert cls.describe_account('111111111111') is None
    assert not cls.is_member('111111111111')


def test_describe_account_other_errors_propagate(cls, org_client):
    org_client.describe_account.side_effect = _client_error('AccessDeniedException')
    with raises(ClientError):
        cls.describe_account('111111111111')


def test_invite_account_already_member(cls, org_client):
    org_client.describe_account.return_value = {'Account': {'Id': '111111111111'}}
    assert cls.invite_account('111111111111') == ALREADY_JOINED_HANDSHAKE_ID
    org_client.invite_account_to_organization.assert_not_called()


def test_invite_account(cls, org_client):
    org_client.describe_account.side_effect = _client_error('AccountNotFoundException')
    org_client.invite_account_to_organization.return_value = {
        'Handshake': {'Id': 'h-123'},
    }
    assert cls.invite_account('111111111111') == 'h-123'
    org_client.invite_account_to_organization.assert_called_once_with(
        Target={'Id': '111111111111', 'Type': 'ACCOUNT'},
    )


def test_invite_account_reuses_open_handshake():
    org_client = boto3.client('organizations', region_name='us-gov-west-1')
    stubber = Stubber(org_client)
    stubber.add_client_error(
        'describe_account',
        service_error_code='AccountNotFoundException',
        expected_params={'AccountId': '111111111111'},
    )
    stubber.add_client_error(
        'invite_account_to_organization',
        service_error_code='DuplicateHandshakeException',
    )
    stubber.add_response(
        'list_handshakes_for_organization',
        {
            'Handshakes': [
                {
                    'Id': 'h-old',
                    'State': 'ACCEPTED',
                    'Parties': [{'Id': '111111111111', 'Type': 'ACCOUNT'}],
                },
                {
                    'Id': 'h-open',
                    'State': 'OPEN',
                    'Parties': [{'Id': '111111111111', 'Type': 'ACCOUNT'}],
                },
            ],
        },
        {'Filter': {'ActionType': 'INVITE'}},
    )
    stubber.activate()

    cls = Organizations(org_client=org_client)

    assert cls.invite_account('111111111111') == 'h-open'
    stubber.assert_no_pending_responses()


def test_invite_account_duplicate_without_open_handshake_raises(cls, org_client):
    org_client.describe_account.side_effect = _client_error('AccountNotFoundException')
    org_client.invite_account_to_organization.side_effect = _client_error(
        'DuplicateHandshakeException',
    )
    paginator = Mock()
    paginator.paginate.return_value.result_key_iters.return_value = [[]]
    org_client.get_paginator.return_value = paginator
    with raises(ClientError):
        cls.invite_account('111111111111')


def test_accept_handshake(cls, org_client):
    assert cls.accept_handshake('h-123')
    org_client.accept_handshake.assert_called_once_with(HandshakeId='h-123')


def test_accept_handshake_already_accepted(cls, org_client):
    org_client.accept_handshake.side_effect = _client_error(
        'HandshakeAlreadyInStateException',
    )
    assert cls.accept_handshake('h-123') is False


def test_accept_handshake_already_in_organization(cls, org_client):
    org_client.accept_handshake.side_effect = _client_error(
        'HandshakeConstraintViolationException',
        reason='ALREADY_IN_AN_ORGANIZATION',
    )
    assert cls.accept_handshake('h-123') is False


def test_accept_handshake_other_constraint_violation_propagates(cls, org_client):
    org_client.accept_handshake.side_effect = _client_error(
        'HandshakeConstraintViolationException',
        reason='ORGANIZATION_MEMBERSHIP_CHANGE_RATE_LIMIT_EXCEEDED',
    )
    with raises(ClientError):
        cls.accept_handshake('h-123')


def test_is_already_member_error_ignores_message_text():
    error = ClientError(
        error_response={
            'Error': {
                'Code': 'AccessDeniedException',
                'Message': 'Account is already a member of an organization',
            },
        },
        operation_name='AcceptHandshake',
    )
    assert not is_already_member_error(error)


def test_get_child_ou_id(cls, org_client):
    paginator = Mock()
    paginator.paginate.return_value.result_key_iters.return_value = [[
        {'Id': 'ou-active', 'Name': 'Active'},
        {'Id': 'ou-entry', 'Name': 'Entry'},
    ]]
    org_client.get_paginator.return_value = paginator
    assert cls.get_child_ou_id('ou-sandbox', 'Entry') == 'ou-entry'
    paginator.paginate.assert_called_once_with(ParentId='ou-sandbox')


def test_get_child_ou_id_missing(cls, org_client):
    paginator = Mock()
    paginator.paginate.return_value.result_key_iters.return_value = [[]]
    org_client.get_paginator.return_value = paginator
    with raises(OrganizationsException):
        cls.get_child_ou_id('ou-sandbox', 'Entry')


def test_move_account(cls, org_client):
    org_client.list_parents.return_value = {'Parents': [{'Id': 'r-root', 'Type': 'ROOT'}]}
    cls.move_account('111111111111', 'ou-entry')
    org_client.move_account.assert_called_once_with(
        AccountId='111111111111',
        SourceParentId='r-root',
        DestinationParentId='ou-entry',
    )


def test_move_account_already_in_destination(cls, org_client):
    org_client.list_parents.return_value = {'Parents': [{'Id': 'ou-entry'}]}
    cls.move_account('111111111111', 'ou-entry')
    org_client.move_account.assert_not_called()


def test_move_account_concurrent_move(cls, org_client):
    org_client.list_parents.return_value = {'Parents': [{'Id': 'r-root'}]}
    org_client.move_account.side_effect = _client_error('DuplicateAccountException')
    cls.move_account('111111111111', 'ou-entry')


def test_list_accounts_in_ou(cls, org_client):
    paginator = Mock()
    paginator.paginate.return_value.result_key_iters.return_value = [
        [{'Id': '111111111111'}],
        [{'Id': '222222222222'}],
    ]
    org_client.get_paginator.return_value = paginator
    assert [a['Id'] for a in cls.list_accounts_in_ou('ou-entry')] == [
        '111111111111',
        '222222222222',
    ]

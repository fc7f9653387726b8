# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

import pytest
from mock import Mock

from govcloud_bridge.inventory.registration import (
    RegistrationCollaborators,
    register_account,
    reserved_account_ids_from_environment,
)
from govcloud_bridge.shared.errors import (
    AccountAlreadyRegisteredError,
    ReservedAccountError,
)

RESERVED = frozenset(('900000000001', '900000000002', '900000000003'))


@pytest.fixture
def account_store():
    store = Mock()
    store.create.side_effect = lambda record: record
    return store


@pytest.fixture
def events():
    return Mock()


@pytest.fixture
def organizations():
    organizations = Mock()
    organizations.describe_account.return_value = {
        'Id': '111111111111',
        'Name': 'Test-Acct',
        'Email': 'user@example.com',
    }
    return organizations


@pytest.fixture
def collaborators(account_store, events, organizations):
    return RegistrationCollaborators(
        account_store=account_store,
        events=events,
        reserved_account_ids=RESERVED,
        organizations=organizations,
    )


@pytest.mark.parametrize('account_id', sorted(RESERVED))
def test_reserved_accounts_are_rejected_without_write(
    account_id, collaborators, account_store, events,
):
    with pytest.raises(ReservedAccountError) as error:
        register_account(account_id, collaborators)
    assert error.value.status_code == 400
    account_store.create.assert_not_called()
    events.put_event.assert_not_called()


def test_register_account(collaborators, account_store, events):
    record = register_account(
        '111111111111',
        collaborators,
        commercial_linked_account_id='222222222222',
    )
    assert record.aws_account_id == '111111111111'
    assert record.status == 'CleanUp'
    assert record.name == 'Test-Acct'
    assert record.email == 'user@example.com'
    assert record.commercial_linked_account_id == '222222222222'
    events.put_event.assert_called_once_with(
        'CleanAccountRequest',
        {'accountId': '111111111111', 'reason': 'AccountRegistered'},
        resources=['111111111111'],
    )


def test_register_account_without_organizations(account_store, events):
    collaborators = RegistrationCollaborators(account_store, events, RESERVED)
    record = register_account('111111111111', collaborators, account_name='Fallback')
    assert record.name == 'Fallback'
    assert record.email is None


def test_second_registration_is_an_error(collaborators, account_store, events):
    account_store.create.side_effect = AccountAlreadyRegisteredError('exists')
    with pytest.raises(AccountAlreadyRegisteredError):
        register_account('111111111111', collaborators)
    events.put_event.assert_not_called()


def test_reserved_account_ids_from_environment():
    assert reserved_account_ids_from_environment({
        'ORG_MGT_ACCOUNT_ID': '900000000001',
        'IDC_ACCOUNT_ID': '900000000002',
        'HUB_ACCOUNT_ID': '900000000003',
    }) == RESERVED

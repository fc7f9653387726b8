# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

from botocore.exceptions import ClientError
from mock import Mock
from pytest import fixture, raises

from govcloud_bridge.inventory.account_store import (
    InventoryAccountRecord,
    SandboxAccountStore,
)
from govcloud_bridge.shared.errors import (
    AccountAlreadyRegisteredError,
    LinkedAccountMismatchError,
)


def _conditional_check_failed():
    return ClientError(
        error_response={'Error': {'Code': 'ConditionalCheckFailedException', 'Message': ''}},
        operation_name='PutItem',
    )


@fixture
def table():
    return Mock()


@fixture
def cls(table):
    return SandboxAccountStore(table=table)


def test_requires_table():
    with raises(ValueError):
        SandboxAccountStore()


def test_record_item_round_trip():
    record = InventoryAccountRecord(
        aws_account_id='111111111111',
        name='Test-Acct',
        email='user@example.com',
        commercial_linked_account_id='222222222222',
        created_time='2024-01-01T00:00:00+00:00',
    )
    item = record.to_item()
    assert item['awsAccountId'] == '111111111111'
    assert item['status'] == 'CleanUp'
    assert item['commercialLinkedAccountId'] == '222222222222'
    assert item['meta']['lastEditTime'] == '2024-01-01T00:00:00+00:00'
    assert InventoryAccountRecord.from_item(item).commercial_linked_account_id == '222222222222'


def test_unset_optional_fields_are_left_out():
    item = InventoryAccountRecord(aws_account_id='111111111111').to_item()
    assert 'commercialLinkedAccountId' not in item
    assert 'email' not in item


def test_get(cls, table):
    table.get_item.return_value = {'Item': {'awsAccountId': '111111111111', 'status': 'Available'}}
    record = cls.get('111111111111')
    assert record.status == 'Available'
    table.get_item.assert_called_once_with(
        Key={'awsAccountId': '111111111111'},
        ConsistentRead=True,
    )


def test_get_missing(cls, table):
    table.get_item.return_value = {}
    assert cls.get('111111111111') is None


def test_create_is_conditional(cls, table):
    cls.create(InventoryAccountRecord(aws_account_id='111111111111'))
    assert table.put_item.call_args.kwargs['ConditionExpression'] == (
        'attribute_not_exists(awsAccountId)'
    )


def test_create_existing_record(cls, table):
    table.put_item.side_effect = _conditional_check_failed()
    with raises(AccountAlreadyRegisteredError):
        cls.create(InventoryAccountRecord(aws_account_id='111111111111'))


def test_create_other_errors_propagate(cls, table):
    table.put_item.side_effect = ClientError(
        error_response={'Error': {'Code': 'ProvisionedThroughputExceededException'}},
        operation_name='PutItem',
    )
    with raises(ClientError):
        cls.create(InventoryAccountRecord(aws_account_id='111111111111'))


def test_link_commercial_account(cls, table):
    cls.link_commercial_account('111111111111', '222222222222')
    kwargs = table.update_item.call_args.kwargs
    assert kwargs['Key'] == {'awsAccountId': '111111111111'}
    assert kwargs['ExpressionAttributeValues'][':commercial'] == '222222222222'


def test_link_commercial_account_mismatch(cls, table):
    table.update_item.side_effect = _conditional_check_failed()
    with raises(LinkedAccountMismatchError):
        cls.link_commercial_account('111111111111', '222222222222')


def test_find_all_follows_pagination(cls, table):
    table.scan.side_effect = [
        {'Items': [{'awsAccountId': '111111111111'}], 'LastEvaluatedKey': {'awsAccountId': '111111111111'}},
        {'Items': [{'awsAccountId': '222222222222'}]},
    ]
    assert [r.aws_account_id for r in cls.find_all()] == ['111111111111', '222222222222']
    table.scan.assert_called_with(ExclusiveStartKey={'awsAccountId': '111111111111'})

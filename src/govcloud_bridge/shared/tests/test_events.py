# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

# pylint: skip-file

import json

from mock import Mock, patch
from pytest import raises

from govcloud_bridge.shared.events import EventPublishError, SandboxEvents


def test_put_event():
    client = Mock()
    client.put_events.return_value = {'FailedEntryCount': 0, 'Entries': [{}]}
    events = SandboxEvents('RegisterInISB', namespace='isb', eventbus_name='bus', client=client)
    with patch.dict('os.environ', {'_X_AMZN_TRACE_ID': 'Root=1-abc;Parent=2;Sampled=1'}):
        events.put_event('CleanAccountRequest', {'accountId': '111111111111'}, ['111111111111'])

    entry = client.put_events.call_args.kwargs['Entries'][0]
    assert entry['Source'] == 'isb.RegisterInISB'
    assert entry['EventBusName'] == 'bus'
    assert entry['DetailType'] == 'CleanAccountRequest'
    assert json.loads(entry['Detail']) == {'accountId': '111111111111'}
    assert entry['Resources'] == ['111111111111']
    assert entry['TraceHeader'] == 'Root=1-abc'


def test_defaults_from_environment():
    with patch.dict('os.environ', {'ISB_NAMESPACE': 'myisb', 'ISB_EVENT_BUS': 'isb-bus'}):
        events = SandboxEvents('RegisterInISB', client=Mock())
    assert events.source == 'myisb.RegisterInISB'
    assert events.eventbus_name == 'isb-bus'


def test_failed_entries_raise():
    client = Mock()
    client.put_events.return_value = {'FailedEntryCount': 1, 'Entries': [{'ErrorCode': 'x'}]}
    events = SandboxEvents('RegisterInISB', namespace='isb', eventbus_name='bus', client=client)
    with raises(EventPublishError):
        events.put_event('CleanAccountRequest', {})

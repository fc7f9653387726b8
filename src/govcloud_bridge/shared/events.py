# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Standardized class for pushing account lifecycle events onto the
sandbox event bus
"""

import json
import os
import boto3

from govcloud_bridge.shared.logger import configure_logger

LOGGER = configure_logger(__name__)


class EventPublishError(Exception):
    """Raised when EventBridge reports a failed entry"""


class SandboxEvents:
    def __init__(self, service, namespace=None, eventbus_name=None, client=None):
        """
        client: Any Boto3 EventBridge client
        service: The name of the emitting service, e.g. RegisterInISB
        namespace: Defaults to the ISB_NAMESPACE environment variable
        eventbus_name: Defaults to the ISB_EVENT_BUS environment variable
        """
        self.events = client if client else boto3.client("events")
        namespace = namespace or os.getenv("ISB_NAMESPACE", "isb")
        self.source = f"{namespace}.{service}"
        self.eventbus_name = (
            os.environ.get("ISB_EVENT_BUS", "default")
            if eventbus_name is None
            else eventbus_name
        )

    def put_event(self, detail_type, detail, resources=None):
        payload = {
            "Source": self.source,
            "Resources": resources or [],
            "DetailType": detail_type,
            "Detail": json.dumps(detail),
            "EventBusName": self.eventbus_name,
        }
        trace_id = os.getenv("_X_AMZN_TRACE_ID")
        if trace_id:
            payload["TraceHeader"] = trace_id.split(";")[0]
        response = self.events.put_events(Entries=[payload])
        if response.get("FailedEntryCount"):
            raise EventPublishError(
                f"Failed to publish {detail_type}: {response.get('Entries')}",
            )
        LOGGER.debug("Published %s from %s", detail_type, self.source)

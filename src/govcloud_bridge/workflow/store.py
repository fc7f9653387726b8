# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Checkpoint stores for workflow executions.

Every save is conditional on the version that was loaded, so two invocations
advancing the same execution cannot both commit a transition.
"""

import copy

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from govcloud_bridge.shared.errors import (
    CheckpointConflictError,
    ExecutionNotFoundError,
)
from govcloud_bridge.shared.logger import configure_logger
from govcloud_bridge.workflow.execution import WorkflowExecution
from govcloud_bridge.workflow.states import ExecutionStatus

LOGGER = configure_logger(__name__)
CONDITIONAL_CHECK_FAILED_ERROR_CODE = "ConditionalCheckFailedException"


class InMemoryExecutionStore:
    """
    Keeps executions in the memory of the current process
    """

    def __init__(self):
        self._items = {}

    def create(self, execution):
        if execution.execution_id in self._items:
            raise CheckpointConflictError(
                f"Execution {execution.execution_id} exists already",
            )
        self._items[execution.execution_id] = copy.deepcopy(execution.to_item())

    def get(self, execution_id):
        item = self._items.get(execution_id)
        if item is None:
            raise ExecutionNotFoundError(f"Execution {execution_id} not found")
        return WorkflowExecution.from_item(copy.deepcopy(item))

    def save(self, execution):
        stored = self._items.get(execution.execution_id)
        if stored is None or stored["version"] != execution.version:
            raise CheckpointConflictError(
                f"Execution {execution.execution_id} was modified concurrently",
            )
        execution.version += 1
        self._items[execution.execution_id] = copy.deepcopy(execution.to_item())

    def list_running(self):
        return [
            WorkflowExecution.from_item(copy.deepcopy(item))
            for item in self._items.values()
            if item["status"] == ExecutionStatus.RUNNING.value
        ]


class ExecutionStore:
    """
    Class used for modeling the workflow execution table, keyed by
    executionId
    """

    def __init__(self, table_name=None, table=None):
        if not table and not table_name:
            raise ValueError("Either a table_name or a table is required")
        self.table = table or boto3.resource("dynamodb").Table(table_name)

    def create(self, execution):
        try:
            self.table.put_item(
                Item=execution.to_item(),
                ConditionExpression="attribute_not_exists(executionId)",
            )
        except ClientError as error:
            if error.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED_ERROR_CODE:
                raise CheckpointConflictError(
                    f"Execution {execution.execution_id} exists already",
                ) from error
            raise

    def get(self, execution_id):
        response = self.table.get_item(
            Key={"executionId": execution_id},
            ConsistentRead=True,
        )
        item = response.get("Item")
        if not item:
            raise ExecutionNotFoundError(f"Execution {execution_id} not found")
        return WorkflowExecution.from_item(item)

    def save(self, execution):
        expected_version = execution.version
        execution.version += 1
        try:
            self.table.put_item(
                Item=execution.to_item(),
                ConditionExpression="version = :expected",
                ExpressionAttributeValues={":expected": expected_version},
            )
        except ClientError as error:
            execution.version = expected_version
            if error.response["Error"]["Code"] == CONDITIONAL_CHECK_FAILED_ERROR_CODE:
                raise CheckpointConflictError(
                    f"Execution {execution.execution_id} was modified concurrently",
                ) from error
            raise
        LOGGER.debug(
            "Checkpointed %s at %s (version %s)",
            execution.execution_id,
            execution.state,
            execution.version,
        )

    def list_running(self):
        scan_kwargs = {
            "FilterExpression": Attr("status").eq(ExecutionStatus.RUNNING.value),
        }
        executions = []
        while True:
            response = self.table.scan(**scan_kwargs)
            executions.extend(
                WorkflowExecution.from_item(item)
                for item in response.get("Items", [])
            )
            if "LastEvaluatedKey" not in response:
                return executions
            scan_kwargs["ExclusiveStartKey"] = response["LastEvaluatedKey"]

# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Drives workflow executions through the transition table.

Each call to `advance` loads the execution, runs states until the
execution has to wait or reaches a terminal status, and checkpoints after
every state. Waits are persisted as a resume time, so a process restart
between states only delays the execution. A task is claimed with a
checkpoint before its step runs, so overlapping invocations never run the
same step twice while the claim holds.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from govcloud_bridge.shared.errors import CheckpointConflictError
from govcloud_bridge.shared.logger import configure_logger
from govcloud_bridge.workflow.execution import WorkflowExecution
from govcloud_bridge.workflow.invokers import StepInvocationError
from govcloud_bridge.workflow.states import (
    STATE_MACHINE,
    ExecutionStatus,
    State,
    StateType,
    Wait,
)

LOGGER = configure_logger(__name__)

TIMEOUT_ERROR = "States.Timeout"
ABORTED_ERROR = "States.Aborted"


def _utc_now():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class WorkflowTimings:
    creation_status_poll: timedelta = timedelta(seconds=5)
    stack_sets: timedelta = timedelta(minutes=2)
    timeout: timedelta = timedelta(minutes=40)
    task_lease: timedelta = timedelta(minutes=15)

    @classmethod
    def from_environment(cls, env):
        return cls(
            creation_status_poll=timedelta(seconds=env["CREATION_STATUS_POLL_SECONDS"]),
            stack_sets=timedelta(seconds=env["STACK_SET_WAIT_SECONDS"]),
            timeout=timedelta(seconds=env["WORKFLOW_TIMEOUT_SECONDS"]),
            task_lease=timedelta(seconds=env["TASK_LEASE_SECONDS"]),
        )

    def duration_of(self, wait):
        return {
            Wait.CREATION_STATUS_POLL: self.creation_status_poll,
            Wait.STACK_SETS: self.stack_sets,
        }[wait]


class WorkflowOrchestrator:
    def __init__(
        self,
        store,
        step_invoker,
        timings=None,
        arn_prefix=None,
        clock=_utc_now,
        id_factory=lambda: str(uuid.uuid4()),
    ):
        self.store = store
        self.step_invoker = step_invoker
        self.timings = timings or WorkflowTimings()
        self.arn_prefix = arn_prefix
        self.clock = clock
        self.id_factory = id_factory

    def _execution_arn(self, execution_id):
        if not self.arn_prefix:
            return execution_id
        return f"{self.arn_prefix}:{execution_id}"

    def start_execution(self, execution_input, now=None):
        """
        Creates a new execution for the input. Identical inputs start
        independent executions.
        """
        now = now or self.clock()
        execution_id = self.id_factory()
        execution = WorkflowExecution(
            execution_id=execution_id,
            execution_arn=self._execution_arn(execution_id),
            input=dict(execution_input),
            start_time=now,
            data=dict(execution_input),
        )
        execution.record("ExecutionStarted", now)
        self.store.create(execution)
        LOGGER.info(
            "Started execution %s (mode: %s)",
            execution_id,
            execution_input.get("mode"),
        )
        return execution

    def describe_execution(self, execution_id):
        return self.store.get(execution_id)

    def stop_execution(self, execution_id, cause=None, now=None):
        """
        Aborts a running execution. Side effects of completed steps stay in
        place, the history shows how far the execution got.
        """
        now = now or self.clock()
        execution = self.store.get(execution_id)
        if execution.is_terminal:
            LOGGER.info(
                "Execution %s is already %s, nothing to stop",
                execution_id,
                execution.status.value,
            )
            return execution
        execution.finish(
            ExecutionStatus.ABORTED,
            now,
            error=ABORTED_ERROR,
            cause=cause or "Execution stopped by caller",
        )
        execution.record("ExecutionAborted", now)
        self.store.save(execution)
        LOGGER.warning("Execution %s aborted in %s", execution_id, execution.state)
        return execution

    def advance(self, execution_id, now=None):
        """
        Runs the execution until it waits or terminates.

        Raises:
            CheckpointConflictError: When another invocation changed the
                execution meanwhile, or holds the claim on the current
                task. The transition in progress is not committed.
        """
        now = now or self.clock()
        execution = self.store.get(execution_id)
        while not execution.is_terminal:
            if now - execution.start_time >= self.timings.timeout:
                execution.finish(
                    ExecutionStatus.TIMED_OUT,
                    now,
                    error=TIMEOUT_ERROR,
                    cause=f"Execution exceeded {self.timings.timeout}",
                )
                execution.record("ExecutionTimedOut", now)
                self.store.save(execution)
                LOGGER.error(
                    "Execution %s timed out in %s",
                    execution_id,
                    execution.state,
                )
                break
            if execution.resume_at and now < execution.resume_at:
                break
            self._run_state(execution, now)
            self.store.save(execution)
        return execution

    def advance_due(self, now=None):
        """
        Advances every running execution. Executions that are advanced by
        a concurrent invocation are left to that invocation.
        """
        now = now or self.clock()
        advanced = []
        for execution in self.store.list_running():
            try:
                advanced.append(self.advance(execution.execution_id, now=now))
            except CheckpointConflictError as error:
                LOGGER.warning("Skipping execution: %s", error)
        return advanced

    def run(self, execution_id, sleep=time.sleep):
        """
        Advances the execution in this process until it terminates,
        sleeping through the waits.
        """
        while True:
            execution = self.advance(execution_id, now=self.clock())
            if execution.is_terminal:
                return execution
            delay = (execution.resume_at - self.clock()).total_seconds()
            sleep(max(delay, 0))

    def _run_state(self, execution, now):
        state = State(execution.state)
        definition = STATE_MACHINE[state]
        execution.resume_at = None

        if definition.type is StateType.CHOICE:
            self._transition(execution, definition.choose(execution.data), now)
        elif definition.type is StateType.WAIT:
            execution.resume_at = now + self.timings.duration_of(definition.wait)
            self._transition(execution, definition.next, now)
        elif definition.type is StateType.TASK:
            self._run_task(execution, definition, now)
        elif definition.type is StateType.PASS:
            execution.data = self._execution_metadata(execution)
            self._transition(execution, definition.next, now)
        elif definition.type is StateType.SUCCEED:
            execution.finish(ExecutionStatus.SUCCEEDED, now, result=execution.data)
            execution.record("ExecutionSucceeded", now)
            LOGGER.info("Execution %s succeeded", execution.execution_id)
        else:
            cause = definition.cause or execution.data.get(definition.cause_key)
            execution.finish(
                ExecutionStatus.FAILED,
                now,
                error=definition.error,
                cause=cause,
            )
            execution.record("ExecutionFailed", now, error=definition.error)
            LOGGER.error(
                "Execution %s failed with %s: %s",
                execution.execution_id,
                definition.error,
                cause,
            )

    def _claim_task(self, execution, definition, now):
        started_at = execution.task_started_at
        if started_at and now - started_at < self.timings.task_lease:
            raise CheckpointConflictError(
                f"Execution {execution.execution_id} is running step "
                f"{definition.step.value} in another invocation since "
                f"{started_at.isoformat()}",
            )
        if started_at:
            LOGGER.warning(
                "Execution %s: claim on step %s from %s expired, running it again",
                execution.execution_id,
                definition.step.value,
                started_at.isoformat(),
            )
        execution.task_started_at = now
        execution.record("TaskStarted", now, step=definition.step.value)
        self.store.save(execution)

    def _run_task(self, execution, definition, now):
        self._claim_task(execution, definition, now)
        payload = {key: execution.data.get(key) for key in definition.parameters}
        LOGGER.info(
            "Execution %s running step %s",
            execution.execution_id,
            definition.step.value,
        )
        try:
            output = self.step_invoker.invoke(definition.step, payload) or {}
        except StepInvocationError as error:
            self._fail_task(execution, error.error_type, str(error), now)
            return
        except Exception as error:  # pylint: disable=broad-except
            self._fail_task(execution, type(error).__name__, str(error), now)
            return

        execution.task_started_at = None
        data = {key: execution.data.get(key) for key in definition.carried}
        if definition.result_key:
            data[definition.result_key] = output
        else:
            data.update({key: output.get(key) for key in definition.selected})
        execution.data = data
        execution.record("TaskSucceeded", now, step=definition.step.value)
        self._transition(execution, definition.next, now)

    def _fail_task(self, execution, error, cause, now):
        LOGGER.error(
            "Execution %s failed in %s with %s: %s",
            execution.execution_id,
            execution.state,
            error,
            cause,
        )
        execution.finish(ExecutionStatus.FAILED, now, error=error, cause=cause)
        execution.record("TaskFailed", now, error=error)

    @staticmethod
    def _transition(execution, next_state, now):
        execution.state = next_state.value
        execution.record("StateEntered", now)

    @staticmethod
    def _execution_metadata(execution):
        result = execution.data.get("result") or {}
        return {
            "executionId": execution.execution_id,
            "executionArn": execution.execution_arn,
            "startTime": execution.start_time.isoformat(),
            "input": execution.input,
            "govCloudAccountId": (
                result.get("govCloudAccountId")
                or execution.data.get("govCloudAccountId")
            ),
            "commercialAccountId": (
                result.get("commercialAccountId")
                or execution.data.get("commercialAccountId")
            ),
            "result": result,
        }

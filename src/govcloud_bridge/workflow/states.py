# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
States and transition table of the GovCloud account workflow.

Create flow:
    InitiateAccountCreation -> WaitForCreationStatus -> CheckAccountStatus
    -> AccountCreationComplete? (SUCCEEDED joins, FAILED fails, otherwise
    waits again)

Join flow, entered directly for join-existing requests:
    SendOrganizationInvitation -> AcceptInvitation -> MoveToEntryOU
    -> WaitForStackSets -> RegisterInISB -> AddMetadata -> Success
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from govcloud_bridge.workflow.requests import CREATE_MODE, JOIN_EXISTING_MODE


class State(str, Enum):
    MODE_DISPATCH = "CreateOrJoinExisting?"
    INITIATE_CREATION = "InitiateAccountCreation"
    WAIT_FOR_CREATION_STATUS = "WaitForCreationStatus"
    CHECK_ACCOUNT_STATUS = "CheckAccountStatus"
    ACCOUNT_CREATION_COMPLETE = "AccountCreationComplete?"
    SEND_INVITATION = "SendOrganizationInvitation"
    ACCEPT_INVITATION = "AcceptInvitation"
    MOVE_TO_ENTRY_OU = "MoveToEntryOU"
    WAIT_FOR_STACK_SETS = "WaitForStackSets"
    REGISTER_IN_ISB = "RegisterInISB"
    ADD_METADATA = "AddMetadata"
    SUCCESS = "Success"
    ACCOUNT_CREATION_FAILED = "AccountCreationFailed"
    INVALID_MODE = "InvalidMode"


class ExecutionStatus(str, Enum):
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    ABORTED = "ABORTED"

    @property
    def is_terminal(self):
        return self is not ExecutionStatus.RUNNING


class StateType(Enum):
    CHOICE = "Choice"
    TASK = "Task"
    WAIT = "Wait"
    PASS = "Pass"
    SUCCEED = "Succeed"
    FAIL = "Fail"


class Step(str, Enum):
    """
    Names of the step executors, used to look up how to invoke them
    """
    INITIATE_CREATION = "InitiateCreation"
    CHECK_STATUS = "CheckStatus"
    SEND_INVITATION = "SendInvitation"
    ACCEPT_INVITATION = "AcceptInvitation"
    MOVE_TO_ENTRY_OU = "MoveToEntryOU"
    REGISTER_IN_ISB = "RegisterInISB"


class Wait(str, Enum):
    CREATION_STATUS_POLL = "creation_status_poll"
    STACK_SETS = "stack_sets"


@dataclass(frozen=True)
class StateDefinition:
    """
    One entry of the transition table.

    Task states send the `parameters` keys of the current data to `step`.
    The next data holds the `carried` keys of the current data plus the
    `selected` keys of the step output, or the whole output under
    `result_key` when that is set.
    """
    type: StateType
    next: Optional[State] = None
    step: Optional[Step] = None
    parameters: Tuple[str, ...] = ()
    carried: Tuple[str, ...] = ()
    selected: Tuple[str, ...] = ()
    result_key: Optional[str] = None
    wait: Optional[Wait] = None
    choice_key: Optional[str] = None
    choices: Tuple[Tuple[str, State], ...] = ()
    default: Optional[State] = None
    error: Optional[str] = None
    cause: Optional[str] = None
    cause_key: Optional[str] = None

    def choose(self, data):
        value = data.get(self.choice_key)
        for expected, target in self.choices:
            if value == expected:
                return target
        return self.default


LINKED_ACCOUNT_KEYS = ("govCloudAccountId", "commercialAccountId", "accountName")

STATE_MACHINE = {
    State.MODE_DISPATCH: StateDefinition(
        StateType.CHOICE,
        choice_key="mode",
        choices=(
            (CREATE_MODE, State.INITIATE_CREATION),
            (JOIN_EXISTING_MODE, State.SEND_INVITATION),
        ),
        default=State.INVALID_MODE,
    ),
    State.INITIATE_CREATION: StateDefinition(
        StateType.TASK,
        next=State.WAIT_FOR_CREATION_STATUS,
        step=Step.INITIATE_CREATION,
        parameters=("accountName", "email"),
        carried=("mode",),
        selected=("requestId", "accountName", "email"),
    ),
    State.WAIT_FOR_CREATION_STATUS: StateDefinition(
        StateType.WAIT,
        next=State.CHECK_ACCOUNT_STATUS,
        wait=Wait.CREATION_STATUS_POLL,
    ),
    State.CHECK_ACCOUNT_STATUS: StateDefinition(
        StateType.TASK,
        next=State.ACCOUNT_CREATION_COMPLETE,
        step=Step.CHECK_STATUS,
        parameters=("requestId", "accountName", "email"),
        carried=("requestId",),
        selected=(
            "status",
            "govCloudAccountId",
            "commercialAccountId",
            "accountName",
            "email",
            "message",
        ),
    ),
    State.ACCOUNT_CREATION_COMPLETE: StateDefinition(
        StateType.CHOICE,
        choice_key="status",
        choices=(
            ("SUCCEEDED", State.SEND_INVITATION),
            ("FAILED", State.ACCOUNT_CREATION_FAILED),
        ),
        default=State.WAIT_FOR_CREATION_STATUS,
    ),
    State.SEND_INVITATION: StateDefinition(
        StateType.TASK,
        next=State.ACCEPT_INVITATION,
        step=Step.SEND_INVITATION,
        parameters=LINKED_ACCOUNT_KEYS,
        selected=LINKED_ACCOUNT_KEYS + ("handshakeId",),
    ),
    State.ACCEPT_INVITATION: StateDefinition(
        StateType.TASK,
        next=State.MOVE_TO_ENTRY_OU,
        step=Step.ACCEPT_INVITATION,
        parameters=LINKED_ACCOUNT_KEYS + ("handshakeId",),
        selected=LINKED_ACCOUNT_KEYS,
    ),
    State.MOVE_TO_ENTRY_OU: StateDefinition(
        StateType.TASK,
        next=State.WAIT_FOR_STACK_SETS,
        step=Step.MOVE_TO_ENTRY_OU,
        parameters=LINKED_ACCOUNT_KEYS,
        selected=LINKED_ACCOUNT_KEYS,
    ),
    State.WAIT_FOR_STACK_SETS: StateDefinition(
        StateType.WAIT,
        next=State.REGISTER_IN_ISB,
        wait=Wait.STACK_SETS,
    ),
    State.REGISTER_IN_ISB: StateDefinition(
        StateType.TASK,
        next=State.ADD_METADATA,
        step=Step.REGISTER_IN_ISB,
        parameters=LINKED_ACCOUNT_KEYS,
        carried=LINKED_ACCOUNT_KEYS,
        result_key="result",
    ),
    State.ADD_METADATA: StateDefinition(StateType.PASS, next=State.SUCCESS),
    State.SUCCESS: StateDefinition(StateType.SUCCEED),
    State.ACCOUNT_CREATION_FAILED: StateDefinition(
        StateType.FAIL,
        error="AccountCreationFailed",
        cause_key="message",
    ),
    State.INVALID_MODE: StateDefinition(
        StateType.FAIL,
        error="InvalidMode",
        cause="Mode must be 'create' or 'join-existing'",
    ),
}

START_STATE = State.MODE_DISPATCH

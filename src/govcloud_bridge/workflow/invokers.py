# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Ways for the orchestrator to run a step executor: in process, or as the
step's own Lambda function.
"""

import json

import boto3

from govcloud_bridge.shared.logger import configure_logger
from govcloud_bridge.workflow.states import Step

LOGGER = configure_logger(__name__)

STEP_FUNCTION_NAME_VARIABLES = {
    Step.INITIATE_CREATION: "INITIATE_CREATION_FUNCTION_NAME",
    Step.CHECK_STATUS: "CHECK_STATUS_FUNCTION_NAME",
    Step.SEND_INVITATION: "SEND_INVITATION_FUNCTION_NAME",
    Step.ACCEPT_INVITATION: "ACCEPT_INVITATION_FUNCTION_NAME",
    Step.MOVE_TO_ENTRY_OU: "MOVE_TO_ENTRY_OU_FUNCTION_NAME",
    Step.REGISTER_IN_ISB: "REGISTER_IN_ISB_FUNCTION_NAME",
}


class StepInvocationError(Exception):
    """
    Raised when a remote step reported a function error
    """

    def __init__(self, error_type, message):
        super().__init__(message)
        self.error_type = error_type


class LocalStepInvoker:
    """
    Runs steps in the current process. `steps` maps every Step to a
    callable that accepts the step payload.
    """

    def __init__(self, steps):
        self.steps = steps

    def invoke(self, step, payload):
        return self.steps[step](payload)


class LambdaStepInvoker:
    def __init__(self, function_names, client=None):
        self.function_names = function_names
        self.client = client or boto3.client("lambda")

    @classmethod
    def from_environment(cls, env, client=None):
        return cls(
            {
                step: env[variable]
                for step, variable in STEP_FUNCTION_NAME_VARIABLES.items()
                if env.get(variable)
            },
            client=client,
        )

    def invoke(self, step, payload):
        function_name = self.function_names.get(step)
        if not function_name:
            raise StepInvocationError(
                "StepNotConfigured",
                f"No function configured for step {step.value}",
            )
        LOGGER.debug("Invoking %s for step %s", function_name, step.value)
        response = self.client.invoke(
            FunctionName=function_name,
            InvocationType="RequestResponse",
            Payload=json.dumps(payload),
        )
        output = json.loads(response["Payload"].read() or b"null")
        if response.get("FunctionError"):
            output = output or {}
            raise StepInvocationError(
                output.get("errorType", response["FunctionError"]),
                output.get("errorMessage", f"{function_name} failed"),
            )
        return output

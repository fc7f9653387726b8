# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
A collection of all Error Types used in the GovCloud account bridge
"""


class InvalidConfigError(Exception):
    """
    Used for missing or inconsistent configuration, for example when the
    commercial bridge has neither an API key nor IAM Roles Anywhere settings
    """


class ValidationError(Exception):
    """
    Raised when a request does not match its schema. Maps to an HTTP 400.
    """

    status_code = 400


class ReservedAccountError(Exception):
    """
    Raised when an administrative account (organization management,
    identity center or hub account) is about to be registered as a
    sandbox account. Maps to an HTTP 400.
    """

    status_code = 400


class AccountAlreadyRegisteredError(Exception):
    """
    Raised when an inventory record for the account already exists.
    Registration is exactly-once at the data layer.
    """


class LinkedAccountMismatchError(Exception):
    """
    Raised when an account is already linked to a different commercial
    account. Re-linking requires operator intervention.
    """


class ExecutionNotFoundError(Exception):
    """
    Raised when a workflow execution id is unknown to the execution store
    """


class CheckpointConflictError(Exception):
    """
    Raised when a workflow execution was advanced by another invocation
    between loading and checkpointing it
    """

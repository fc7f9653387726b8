# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
Persisted record of one workflow run
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from govcloud_bridge.workflow.states import START_STATE, ExecutionStatus


def _to_iso(moment):
    return moment.isoformat() if moment else None


def _from_iso(value):
    return datetime.fromisoformat(value) if value else None


@dataclass
class WorkflowExecution:
    execution_id: str
    execution_arn: str
    input: Dict[str, Any]
    start_time: datetime
    status: ExecutionStatus = ExecutionStatus.RUNNING
    state: str = START_STATE.value
    data: Dict[str, Any] = field(default_factory=dict)
    resume_at: Optional[datetime] = None
    task_started_at: Optional[datetime] = None
    stop_time: Optional[datetime] = None
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    cause: Optional[str] = None
    history: List[Dict[str, Any]] = field(default_factory=list)
    version: int = 0

    @property
    def is_terminal(self):
        return self.status.is_terminal

    def record(self, event_type, now, **details):
        self.history.append({
            "timestamp": now.isoformat(),
            "type": event_type,
            "state": self.state,
            **details,
        })

    def finish(self, status, now, error=None, cause=None, result=None):
        self.status = status
        self.stop_time = now
        self.resume_at = None
        self.task_started_at = None
        self.error = error
        self.cause = cause
        self.result = result

    def to_status_response(self):
        response = {
            "executionId": self.execution_id,
            "executionArn": self.execution_arn,
            "status": self.status.value,
            "startDate": _to_iso(self.start_time),
        }
        if self.result is not None:
            response["result"] = self.result
        if self.stop_time:
            response["stopDate"] = _to_iso(self.stop_time)
        if self.error:
            response["error"] = self.error
            response["cause"] = self.cause
        return response

    def to_item(self):
        return {
            "executionId": self.execution_id,
            "executionArn": self.execution_arn,
            "input": self.input,
            "startTime": _to_iso(self.start_time),
            "status": self.status.value,
            "state": self.state,
            "data": self.data,
            "resumeAt": _to_iso(self.resume_at),
            "taskStartedAt": _to_iso(self.task_started_at),
            "stopTime": _to_iso(self.stop_time),
            "result": self.result,
            "error": self.error,
            "cause": self.cause,
            "history": self.history,
            "version": self.version,
        }

    @classmethod
    def from_item(cls, item):
        return cls(
            execution_id=item["executionId"],
            execution_arn=item["executionArn"],
            input=item.get("input") or {},
            start_time=_from_iso(item["startTime"]),
            status=ExecutionStatus(item["status"]),
            state=item["state"],
            data=item.get("data") or {},
            resume_at=_from_iso(item.get("resumeAt")),
            task_started_at=_from_iso(item.get("taskStartedAt")),
            stop_time=_from_iso(item.get("stopTime")),
            result=item.get("result"),
            error=item.get("error"),
            cause=item.get("cause"),
            history=list(item.get("history") or []),
            # DynamoDB returns numbers as Decimal
            version=int(item.get("version", 0)),
        )

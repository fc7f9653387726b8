# Copyright Amazon.com Inc. or its affiliates.
# SPDX-License-Identifier: MIT-0

"""
API Gateway proxy helpers shared by the commercial bridge functions
"""

import json

from schema import SchemaError

from govcloud_bridge.shared.errors import ValidationError


def api_response(status_code, body):
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
        },
        "body": json.dumps(body, default=str),
    }


def api_error(status_code, error, message=None):
    body = {"error": error}
    if message:
        body["message"] = message
    return api_response(status_code, body)


def parse_request(schema, event):
    """
    Decodes the JSON body of a proxy event and validates it.

    Raises:
        ValidationError: When the body is missing, is not JSON, or does not
            match the schema.
    """
    if not event.get("body"):
        raise ValidationError("Request body is required")
    try:
        body = json.loads(event["body"])
    except json.JSONDecodeError as error:
        raise ValidationError("Invalid JSON in request body") from error
    try:
        return schema.validate(body)
    except SchemaError as error:
        raise ValidationError(error.code) from error

# nutriapp/utils/general.py
"""
General-purpose utility functions.

This module contains helpers for service result handling, request payload
filtering and serialization of Supabase client objects.
"""

from datetime import datetime, timezone
from flask import jsonify, request, abort


def _handle_service_result(result, default_error_status=500):
    """
    Parses the result from a service function.
    If it's a tuple (result_dict, status_code), it uses the custom status code
    (201 for creations, 4xx/5xx for errors).
    Otherwise, it assumes success (status 200) or uses the default error status.

    Adds 'error_code' field to error responses for structured frontend handling.
    """
    # Check if the result is a tuple (result_dict, status_code)
    if isinstance(result, tuple) and len(result) == 2:
        result_dict, status_code = result
        if not result_dict.get("success", True):
            result_dict["error_code"] = result_dict.get("error_code", status_code)
        return jsonify(result_dict), status_code

    if result.get("success"):
        return jsonify(result), 200
    else:
        result["error_code"] = result.get("error_code", default_error_status)
        return jsonify(result), default_error_status


def error_result(message, status_code):
    """Shorthand for the (error_dict, status_code) tuple services return."""
    return {"success": False, "error": message}, status_code


def pick_allowed_fields(data, allowed_fields):
    """
    Returns a copy of 'data' restricted to 'allowed_fields'.
    Unknown keys are dropped, never forwarded to Supabase.
    """
    if not isinstance(data, dict):
        return {}
    return {key: value for key, value in data.items() if key in allowed_fields}


def get_json_body():
    """
    Returns the request's JSON body as a dict, or {} when there is none.
    A body that parses to anything other than an object aborts with 400.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, description="O corpo da requisição deve ser um objeto JSON")
    return data


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat()


def to_json_safe(obj):
    """
    Converts Supabase client objects (pydantic models such as User and
    Session) into plain dicts for jsonify. Dicts and lists are walked.
    """
    if obj is None:
        return None
    if hasattr(obj, 'model_dump'):
        return obj.model_dump(mode='json')
    if isinstance(obj, dict):
        return {k: to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_safe(i) for i in obj]
    return obj


def as_number(value):
    """
    Returns 'value' as a float, or None when it is not numeric.
    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None

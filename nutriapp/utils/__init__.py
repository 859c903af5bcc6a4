# nutriapp/utils/__init__.py
"""
Utility functions package.

- general.py: service result handling, payload allow-listing, serialization
"""

from .general import _handle_service_result, error_result, pick_allowed_fields, get_json_body
from .general import utc_now_iso, to_json_safe, as_number

__all__ = [
    '_handle_service_result',
    'error_result',
    'pick_allowed_fields',
    'get_json_body',
    'utc_now_iso',
    'to_json_safe',
    'as_number',
]

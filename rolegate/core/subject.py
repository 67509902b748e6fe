"""
ROLEGATE - Subject Rendering

Safe string rendering of arbitrary permission-check subjects for logs
and audit records.
"""

from collections.abc import Mapping, Sequence, Set
from numbers import Number
from typing import Any


def format_subject(subject: Any) -> str:
    """
    Render a subject for logging without ever raising.

    None -> "null", strings unchanged, numbers via str(), collections as
    "array(N)", other objects as "TypeName#id".
    """
    try:
        if subject is None:
            return "null"
        if isinstance(subject, str):
            return subject
        if isinstance(subject, bool):
            return type(subject).__name__
        if isinstance(subject, Number):
            return str(subject)
        if isinstance(subject, (Sequence, Mapping, Set)) and not isinstance(
            subject, (bytes, bytearray)
        ):
            return f"array({len(subject)})"
        return f"{type(subject).__name__}#{id(subject)}"
    except Exception:
        return type(subject).__name__

"""
dualsub/openai_call.py
=======================
Shared OpenAI call wrapper — DualSub

Provides a thin wrapper around ``client.chat.completions.create`` that
makes exactly ONE attempt and translates transport-level failures into
``NetworkError`` so callers can tell a payload/connectivity problem apart
from a malformed reply.

Usage::

    from dualsub.openai_call import chat_completion_once

    response = chat_completion_once(
        client,
        model="gpt-4o-audio-preview",
        messages=[...],
        temperature=0.2,
    )

This module does NOT:
    - Retry anything (a failed request aborts the job)
    - Create or manage OpenAI client instances
    - Inspect the response body
"""

import logging
from typing import Any

import openai

from dualsub.errors import NetworkError

logger = logging.getLogger("dualsub.openai_call")

# HTTP status codes that mean the upload itself was refused or cut off
_TRANSPORT_STATUS_CODES: set[int] = {408, 413}


def is_transport_error(exc: Exception) -> bool:
    """Return True if the exception is an upload/connection failure."""
    # APITimeoutError is a subclass of APIConnectionError
    if isinstance(exc, openai.APIConnectionError):
        return True
    if isinstance(exc, openai.APIStatusError):
        return exc.status_code in _TRANSPORT_STATUS_CODES
    return False


def chat_completion_once(client: Any, **kwargs: Any) -> Any:
    """
    Call ``client.chat.completions.create(**kwargs)`` a single time.

    Args:
        client:   An instantiated ``openai.OpenAI`` client.
        **kwargs: Passed directly to ``client.chat.completions.create()``.

    Returns:
        The OpenAI ChatCompletion response object.

    Raises:
        NetworkError: On connection errors, timeouts, or HTTP 408/413.
        Any other OpenAI exception is re-raised unchanged.
    """
    try:
        return client.chat.completions.create(**kwargs)
    except Exception as exc:
        if is_transport_error(exc):
            logger.error("OpenAI transport failure: %s", exc)
            raise NetworkError() from exc
        logger.error("OpenAI call failed: %s", exc)
        raise

"""JWT payload inspection - recovers a bearer token's expiry without verifying it."""

import logging
import re

import jwt

from .exceptions import InvalidTokenFormat

logger = logging.getLogger("magento-mcp.tokens")

# Unpadded base64url; header and payload may not be empty
_SEGMENT = re.compile(r"[A-Za-z0-9_-]*")


def decode_token_expiry(token: str) -> int:
    """Decode the ``exp`` claim of a JWT.

    The signature is not checked; Magento validates its own tokens. We only
    need to know when to ask for a new one.

    Args:
        token: Three-segment, dot-delimited JWT.

    Returns:
        Expiry instant in epoch milliseconds.

    Raises:
        InvalidTokenFormat: If the token is not three segments, a segment is
            not base64url, or the payload is not a JSON object with a numeric
            ``exp``.
    """
    segments = token.split(".")
    if len(segments) != 3:
        raise InvalidTokenFormat(
            "Invalid token format",
            errors=[f"Expected 3 dot-delimited segments, got {len(segments)}"],
        )

    header, payload_segment, _signature = segments
    if not header or not payload_segment or not all(
        _SEGMENT.fullmatch(segment) for segment in segments
    ):
        raise InvalidTokenFormat(
            "Invalid token format", errors=["Segment is not base64url encoded"]
        )

    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise InvalidTokenFormat(
            "Invalid token format", errors=[f"Undecodable token: {e}"]
        ) from e

    exp = payload.get("exp")
    # bool is an int subclass but never a valid expiry
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise InvalidTokenFormat(
            "Invalid token format", errors=["Missing or non-numeric 'exp' claim"]
        )

    logger.debug(f"Decoded token expiry: {exp}")
    return int(exp * 1000)

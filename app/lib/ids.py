# app/lib/ids.py

import re
import uuid
from typing import Optional, Union

# RFC 4122 versions 1-5 with the standard variant bits
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def parse_id(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """
    Return `value` as a UUID, or None if it is not a well-formed entity id.

    Used before any lookup so malformed ids never reach the database.
    """
    if isinstance(value, uuid.UUID):
        value = str(value)
    if not isinstance(value, str) or not _UUID_RE.match(value):
        return None
    return uuid.UUID(value)

"""Links to the Mermaid Live Editor."""

import base64
import json
import zlib
from enum import Enum

LIVE_EDITOR_URL = "https://mermaid.live"


class EditorMode(Enum):
    VIEW = "view"
    EDIT = "edit"


def live_editor_url(code: str, mode: EditorMode = EditorMode.VIEW) -> str:
    """Build a https://mermaid.live URL embedding ``code``.

    The editor state is serialized as JSON, deflated with zlib and encoded
    as unpadded URL-safe base64 after a ``pako:`` prefix.
    """
    state = {
        "code": code,
        "mermaid": json.dumps({"theme": "default"}),
        "autoSync": True,
        "updateDiagram": True,
    }
    compressed = zlib.compress(json.dumps(state).encode("utf-8"), 9)
    payload = base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")
    return f"{LIVE_EDITOR_URL}/{mode.value}#pako:{payload}"

"""Figma link parser.

Turns a pasted design-tool link such as::

    https://www.figma.com/file/AbCdEFg12345/Design-System?node-id=120-880

into a ``ParsedFigmaUrl`` carrying the file key and the canonical node id
(``120:880``). Parsing is pure: no network access and no exceptions escape,
a link that cannot be read as a URL is simply reported as invalid.
"""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel

_FIGMA_HOST_RE = re.compile(r"(^|\.)figma\.com$", re.IGNORECASE)
# characters a URL host may never contain
_FORBIDDEN_HOST_RE = re.compile(r"[\s#%/:<>?@\[\\\]^|]")
_FILE_PATH_RE = re.compile(r"/(?:file|design|proto)/([a-zA-Z0-9]+)")
_COMMUNITY_PATH_RE = re.compile(r"/community/file/([a-zA-Z0-9]+)")
_DASHED_NODE_RE = re.compile(r"^[0-9]+-[0-9]+$")


class ParsedFigmaUrl(BaseModel):
    is_valid: bool
    file_key: str | None = None
    node_id: str | None = None

    model_config = {"frozen": True}


def parse_figma_url(raw: str) -> ParsedFigmaUrl:
    try:
        parts = urlsplit(raw.strip())
        hostname = parts.hostname
        # Touching .port validates it; a malformed port raises ValueError
        parts.port
    except (ValueError, AttributeError):
        return ParsedFigmaUrl(is_valid=False)

    if not parts.scheme or not hostname or _FORBIDDEN_HOST_RE.search(hostname):
        return ParsedFigmaUrl(is_valid=False)
    if not _FIGMA_HOST_RE.search(hostname):
        return ParsedFigmaUrl(is_valid=False)

    match = _FILE_PATH_RE.search(parts.path) or _COMMUNITY_PATH_RE.search(parts.path)
    file_key = match.group(1) if match else None

    query = parse_qs(parts.query, keep_blank_values=True)
    raw_node = query.get("node-id", query.get("node_id", [None]))[0]
    node_id = normalize_node_id(raw_node) if raw_node else None

    return ParsedFigmaUrl(is_valid=True, file_key=file_key, node_id=node_id)


def normalize_node_id(node_id: str) -> str:
    """Convert the dashed ``120-880`` form to ``120:880``; pass anything else through."""
    if _DASHED_NODE_RE.match(node_id):
        return node_id.replace("-", ":", 1)
    return node_id

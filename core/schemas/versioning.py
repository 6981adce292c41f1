"""
Schemas & Canonicalization
File: versioning.py

Purpose: Centralize the protocol version constant.
This file must stay tiny and have no imports from other schema files
to avoid circular dependencies.
"""

from typing import Literal

# Version of the signed payload layout (field set, field order, canonical form)
PROTOCOL_VERSION: str = "v1"

# Type alias for protocol version
ProtocolVersion = Literal["v1"]

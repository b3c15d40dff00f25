"""
Value objects exchanged with a protocol driver.

Signature tags follow the Bolt message markers so that drivers speaking the
wire protocol directly can map summary messages without a lookup table.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Union


class Signature(IntEnum):
    SUCCESS = 0x70
    RECORD = 0x71
    IGNORED = 0x7E
    FAILURE = 0x7F


@dataclass(frozen=True)
class Response:
    """A single protocol response: its signature and content payload."""

    signature: Signature
    content: Union[dict[str, Any], list[Any]] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.signature is Signature.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.signature in (Signature.FAILURE, Signature.IGNORED)

    @property
    def code(self) -> Optional[str]:
        if isinstance(self.content, dict):
            return self.content.get("code")
        return None

    def describe(self) -> str:
        """Join the content values with spaces."""
        values = (
            self.content.values() if isinstance(self.content, dict) else self.content
        )
        return " ".join(str(value) for value in values)


def parse_version(version: Any) -> Optional[tuple[int, int]]:
    """Normalize a protocol version given as ``"5.1"``, ``5.1`` or ``(5, 1)``."""
    if version is None:
        return None
    if isinstance(version, (tuple, list)):
        parts = [int(part) for part in version[:2]]
    else:
        parts = [int(part) for part in str(version).split(".")[:2]]
    if not parts:
        return None
    if len(parts) == 1:
        parts.append(0)
    return parts[0], parts[1]

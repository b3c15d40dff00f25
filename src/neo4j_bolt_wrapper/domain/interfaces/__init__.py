"""Domain level interfaces for external collaborators."""

from .protocol_driver import ProtocolDriver

__all__ = ["ProtocolDriver"]

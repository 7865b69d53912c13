"""Port interfaces (Hexagonal Architecture)."""

from src.ports.outbound import ChatSessionPort, RecordStorePort

__all__ = [
    "ChatSessionPort",
    "RecordStorePort",
]

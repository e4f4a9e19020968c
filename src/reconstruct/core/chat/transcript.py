from __future__ import annotations

import threading

from reconstruct.core.reconstruction.schemas import ChatMessage


class ChatTranscript:
    """Ordered conversation history for one capture session."""

    def __init__(self) -> None:
        self._messages: list[ChatMessage] = []
        self._lock = threading.Lock()

    def append(self, role: str, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        with self._lock:
            self._messages.append(message)
        return message

    def messages(self) -> list[ChatMessage]:
        with self._lock:
            return list(self._messages)

    def clear(self) -> None:
        with self._lock:
            self._messages.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

"""
redisstash - Content Codecs

A codec turns application values into storable text and back, declares the
default lifetime of the entries it produces, and may capture output while
a cache entry is being built ("buffering").

Shipped codecs:
- JsonCodec: JSON text, no buffering
- OutputCodec: captures everything printed to stdout between start() and stop()
"""

from __future__ import annotations

import io
import json
import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack, redirect_stdout
from typing import Any

logger = logging.getLogger(__name__)


class ContentCodec(ABC):
    """Abstract base class for content codecs."""

    def __init__(self, lifetime: int = 3600) -> None:
        self.lifetime = lifetime

    def get_lifetime(self) -> int:
        """Default TTL in seconds for entries this codec produces."""
        return self.lifetime

    @abstractmethod
    def encode(self, value: Any) -> str:
        """Prepare a value for storage."""
        pass

    @abstractmethod
    def decode(self, raw: str) -> Any:
        """Rebuild a value from stored content."""
        pass

    def is_buffering(self) -> bool:
        """Whether the codec is currently capturing output."""
        return False

    def start(self) -> None:
        """Begin capturing output. No-op for codecs without buffering."""
        pass

    def get_content(self) -> Any:
        """Return the captured output, or None when nothing is captured."""
        return None

    def stop(self) -> None:
        """Stop capturing output. No-op for codecs without buffering."""
        pass


class JsonCodec(ContentCodec):
    """Stores values as compact UTF-8 JSON."""

    def encode(self, value: Any) -> str:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    def decode(self, raw: str) -> Any:
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(
                f"Failed to decode JSON from cache, returning raw data: {e}",
                extra={"data_preview": raw[:100], "error": str(e)},
            )
            return raw


class OutputCodec(ContentCodec):
    """
    Caches printed output.

    start() redirects sys.stdout into an in-memory buffer; stop() restores it.
    Content is stored as the captured text, unchanged.
    """

    def __init__(self, lifetime: int = 3600) -> None:
        super().__init__(lifetime)
        self._buffer: io.StringIO | None = None
        self._stack: ExitStack | None = None

    def is_buffering(self) -> bool:
        return self._buffer is not None

    def start(self) -> None:
        if self._buffer is not None:
            return
        self._buffer = io.StringIO()
        self._stack = ExitStack()
        self._stack.enter_context(redirect_stdout(self._buffer))

    def get_content(self) -> str | None:
        if self._buffer is None:
            return None
        return self._buffer.getvalue()

    def stop(self) -> None:
        if self._stack is not None:
            self._stack.close()
        self._stack = None
        self._buffer = None

    def encode(self, value: Any) -> str:
        return value if isinstance(value, str) else str(value)

    def decode(self, raw: str) -> str:
        return raw

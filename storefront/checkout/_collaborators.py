"""
Checkout collaborators — proof storage, clipboard and contact handoff.

Each is a small protocol with in-memory implementations for tests and
simple local implementations for running outside a browser.
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PaymentProof:
    """An attached payment screenshot."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1]


# ═══════════════════════════════════════════════════════════════════════════════
# Proof storage
# ═══════════════════════════════════════════════════════════════════════════════


class ProofStorage(Protocol):
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path`` and return its public URL. Raises on failure."""
        ...


class MemoryProofStorage:
    def __init__(self, base_url: str = "memory://payment-proofs") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.objects[path] = (content, content_type)
        return f"{self.base_url}/{path}"


class DirectoryProofStorage:
    """Writes proofs into a local directory; URLs are ``file://`` URIs."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        target = (self._root / path).resolve()
        if self._root.resolve() not in target.parents:
            raise ValueError(f"Refusing to write outside {self._root}: {path}")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return target.as_uri()


# ═══════════════════════════════════════════════════════════════════════════════
# Clipboard
# ═══════════════════════════════════════════════════════════════════════════════


class Clipboard(Protocol):
    async def copy(self, text: str) -> None:
        """Put ``text`` on the clipboard. Raises on failure."""
        ...


class MemoryClipboard:
    def __init__(self) -> None:
        self.text: str | None = None
        self.copies = 0

    async def copy(self, text: str) -> None:
        self.text = text
        self.copies += 1


# ═══════════════════════════════════════════════════════════════════════════════
# Contact launcher
# ═══════════════════════════════════════════════════════════════════════════════


class ContactLauncher(Protocol):
    def open(self, url: str) -> bool:
        """Open the contact deep link. Returns False when nothing could be opened."""
        ...


class BrowserLauncher:
    def open(self, url: str) -> bool:
        opened = webbrowser.open(url, new=2)
        if not opened:
            logger.warning("No browser available to open %s", url)
        return opened


class RecordingLauncher:
    def __init__(self) -> None:
        self.opened: list[str] = []

    def open(self, url: str) -> bool:
        self.opened.append(url)
        return True


__all__ = (
    "PaymentProof",
    "ProofStorage",
    "MemoryProofStorage",
    "DirectoryProofStorage",
    "Clipboard",
    "MemoryClipboard",
    "ContactLauncher",
    "BrowserLauncher",
    "RecordingLauncher",
)

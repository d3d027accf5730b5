from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from boxlink.domain.entities import EmailDescriptor
from boxlink.domain.ports import MailboxPort

log = logging.getLogger(__name__)


class StaticMailbox(MailboxPort):
    """Mailbox source serving one fixed descriptor (demo runtime and tests)."""

    def __init__(self, email: Optional[EmailDescriptor] = None) -> None:
        self._email = email

    def current_email(self) -> Optional[EmailDescriptor]:
        return self._email


class JsonMailbox(MailboxPort):
    """Reads the active message from a host item JSON file on every call.

    The file is written by the mailbox host bridge; a missing file means no
    message is open.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def current_email(self) -> Optional[EmailDescriptor]:
        if not os.path.exists(self.path):
            return None
        with open(self.path, "r", encoding="utf-8") as f:
            raw: Dict[str, Any] = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"{self.path}: mailbox item must be a JSON object")
        log.debug("Loaded mailbox item from %s", self.path)
        return EmailDescriptor.from_host_item(raw)


__all__ = ["JsonMailbox", "StaticMailbox"]

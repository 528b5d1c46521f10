"""Keyword-matched chat responder for the site widget.

One turn: classify the message against an ordered rule list (first match
wins), resolve the reply (static text or a tender lookup), append the exchange
to the chat log, return the reply. A lookup or log failure fails the whole
turn.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

import ndawonga.config as cfg
from ndawonga import db
from ndawonga.state import ChatExchange, Tender

logger = logging.getLogger(__name__)


class TenderLookup(Protocol):
    def latest(self, limit: int) -> List[Tender]: ...


class ChatLog(Protocol):
    def append(self, exchange: ChatExchange) -> int: ...


class ChatLogStore:
    """Append-only log of chat exchanges."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def append(self, exchange: ChatExchange) -> int:
        return db.insert(
            self.db_path,
            "INSERT INTO chatbot_logs (session_id, user_message, bot_response) VALUES (?, ?, ?)",
            (exchange.session_id, exchange.user_message, exchange.bot_response),
        )

    def for_session(self, session_id: str) -> List[ChatExchange]:
        """Exchanges logged for one session, oldest first (for staff inspection)."""
        rows = db.fetch_all(
            self.db_path,
            "SELECT * FROM chatbot_logs WHERE session_id = ? ORDER BY id ASC",
            (session_id,),
        )
        return [ChatExchange(**r) for r in rows]


@dataclass
class ChatTurn:
    reply: str
    intent: str


# ---------------- classification ----------------

Predicate = Callable[[str], bool]


def _contains(*words: str) -> Predicate:
    return lambda lower: any(w in lower for w in words)


# Priority order matters: "tender for this project" must resolve to tenders.
RULES: Sequence[Tuple[str, Predicate]] = (
    ("tender", _contains("tender")),
    ("project", _contains("project")),
    ("certificate", _contains(*cfg.CERTIFICATE_KEYWORDS)),
)
DEFAULT_INTENT = "greeting"


def classify(message: Optional[str]) -> str:
    lower = (message or "").lower()
    for name, matches in RULES:
        if matches(lower):
            return name
    return DEFAULT_INTENT


def _fmt_tender(t: Tender) -> str:
    return f"{t.title} (closes: {t.closing_date or cfg.MISSING_CLOSING_DATE})"


def render_tenders(tenders: List[Tender]) -> str:
    if not tenders:
        return cfg.NO_TENDERS_REPLY
    return "\n".join([cfg.TENDERS_HEADER] + [_fmt_tender(t) for t in tenders])


# ---------------- responder ----------------


class ChatResponder:
    def __init__(
        self,
        tenders: TenderLookup,
        log: ChatLog,
        *,
        tender_limit: int = 5,
        default_session_id: str = "web-session",
    ) -> None:
        self.tenders = tenders
        self.log = log
        self.tender_limit = tender_limit
        self.default_session_id = default_session_id
        self._handlers = {
            "tender": self._tender_reply,
            "project": lambda: cfg.PROJECTS_REPLY,
            "certificate": lambda: cfg.CERTIFICATES_REPLY,
            DEFAULT_INTENT: lambda: cfg.GREETING_REPLY,
        }

    def _tender_reply(self) -> str:
        return render_tenders(self.tenders.latest(self.tender_limit))

    def respond(self, message: Optional[str], session_id: Optional[str] = None) -> ChatTurn:
        """Answer one message and log the exchange.

        Errors from the tender lookup or the log propagate; nothing is
        returned for a failed turn.
        """
        intent = classify(message)
        reply = self._handlers[intent]()
        sid = (session_id or "").strip() or self.default_session_id
        self.log.append(ChatExchange(session_id=sid, user_message=message, bot_response=reply))
        logger.debug("chat turn session=%s intent=%s", sid, intent)
        return ChatTurn(reply=reply, intent=intent)

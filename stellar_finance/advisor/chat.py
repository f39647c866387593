# stellar_finance/advisor/chat.py
from __future__ import annotations

import logging
import re
import uuid
import weakref
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from stellar_finance.errors import ChatBusyError, ChatSessionNotFound, ChatStreamError
from stellar_finance.schemas import ChatMessageView
from stellar_finance.texts import CHAT_ERROR_MSG, CHAT_GREETING, CHAT_SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

_BOLD_RE = re.compile(r"\*\*(.*?)\*\*")


def markdown_to_html(text: str) -> str:
    """
    Subconjunto mínimo de markdown para las burbujas del bot:
    escapa &, <, > y luego solo convierte **negritas** y saltos de línea.
    """
    if not text:
        return ""
    safe = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
    safe = _BOLD_RE.sub(r"<strong>\1</strong>", safe)
    return safe.replace("\n", "<br />")


@dataclass(frozen=True)
class ChatMessage:
    sender: str  # "user" | "bot"
    text: str
    is_loading: bool = False

    def to_view(self) -> ChatMessageView:
        return ChatMessageView(
            sender=self.sender,
            text=self.text,
            html="" if self.is_loading else markdown_to_html(self.text),
            is_loading=self.is_loading,
        )


class PendingMessage:
    """Buffer de la respuesta en curso: solo se le agrega texto al final."""

    def __init__(self) -> None:
        self._parts: List[str] = []
        self._text = ""

    def append(self, chunk: str) -> str:
        self._parts.append(chunk)
        self._text += chunk
        return self._text

    @property
    def text(self) -> str:
        return self._text

    @property
    def chunk_count(self) -> int:
        return len(self._parts)


class ChatSession:
    """
    Conversación de un panel de chat. Se crea al abrir el panel por primera vez
    y vive mientras el panel exista; un error no la reinicia.
    """

    def __init__(self, client, system_instruction: str = CHAT_SYSTEM_INSTRUCTION, greeting: str = CHAT_GREETING):
        self.id = uuid.uuid4().hex
        self._client = client
        self._system = system_instruction
        self._history: List[Dict[str, str]] = []  # solo turnos completados, para el modelo
        self._transcript: Tuple[ChatMessage, ...] = (ChatMessage("bot", greeting),)
        self.busy = False
        self.reservation = 0  # sube con cada send; identifica al stream dueño de la reserva

    @property
    def transcript(self) -> Tuple[ChatMessage, ...]:
        return self._transcript

    def to_view(self) -> List[ChatMessageView]:
        return [m.to_view() for m in self._transcript]

    def _replace_last(self, message: ChatMessage) -> None:
        self._transcript = self._transcript[:-1] + (message,)

    def send(self, text: str) -> AsyncIterator[str]:
        """
        Reserva la sesión y devuelve el iterador de fragmentos.
        La reserva es inmediata: un segundo send antes de terminar el stream falla con ChatBusyError.
        Si el iterador se descarta sin consumirlo, la reserva se libera al recolectarlo.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message text is empty.")
        if self.busy:
            raise ChatBusyError(f"Chat session {self.id} is still answering the previous message.")
        self.busy = True
        self.reservation += 1
        self._transcript = self._transcript + (
            ChatMessage("user", text),
            ChatMessage("bot", "", is_loading=True),
        )
        stream = self._stream(text, self.reservation)
        weakref.finalize(stream, self.release, self.reservation)
        return stream

    def release(self, reservation: Optional[int] = None) -> None:
        """
        Suelta la reserva si sigue tomada. Con `reservation`, solo si es la vigente
        (un stream viejo no libera el turno de uno nuevo). Una burbuja que quedó
        cargando pasa al mensaje de error.
        """
        if not self.busy:
            return
        if reservation is not None and reservation != self.reservation:
            return
        if self._transcript[-1].is_loading:
            self._replace_last(ChatMessage("bot", CHAT_ERROR_MSG))
        self.busy = False

    async def _stream(self, text: str, reservation: int) -> AsyncIterator[str]:
        messages = [{"role": "system", "content": self._system}, *self._history, {"role": "user", "content": text}]
        pending = PendingMessage()
        try:
            async for chunk in self._client.stream_chat(messages):
                pending.append(chunk)
                self._replace_last(ChatMessage("bot", pending.text))
                yield chunk
        except Exception as e:
            logger.exception("Chatbot error")
            self._replace_last(ChatMessage("bot", CHAT_ERROR_MSG))
            raise ChatStreamError(str(e)) from e
        except BaseException:
            # cancelado o cerrado a medias (cliente desconectado): la respuesta queda incompleta
            logger.warning("Chat %s reply interrupted", self.id)
            self._replace_last(ChatMessage("bot", CHAT_ERROR_MSG))
            raise
        else:
            # stream vacío: queda la burbuja sin texto, ya no cargando
            self._replace_last(ChatMessage("bot", pending.text))
            self._history.extend([
                {"role": "user", "content": text},
                {"role": "assistant", "content": pending.text},
            ])
            logger.debug("Chat %s reply complete (%d chunks)", self.id, pending.chunk_count)
        finally:
            self.release(reservation)


class ChatSessionStore:
    """Dueño de las sesiones abiertas; la app guarda una instancia en app.state."""

    def __init__(self, client) -> None:
        self._client = client
        self._sessions: Dict[str, ChatSession] = {}

    def create(self) -> ChatSession:
        session = ChatSession(self._client)
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> ChatSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise ChatSessionNotFound(session_id) from None

    def close(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise ChatSessionNotFound(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

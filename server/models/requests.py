from pydantic import BaseModel

from shared.models.agent import HistoryMessage


class ChatRequest(BaseModel):
    """Body of POST /chat.

    Fields are lenient on presence so that a missing token answers 403 and a
    missing message 400 from the agent's own checks; wrong types fail validation.
    """

    message: str = ""
    token: str = ""
    history: list[HistoryMessage] | None = None

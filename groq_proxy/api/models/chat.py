"""
Request and response models for chat endpoints.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ChatMessage(BaseModel):
    """A single conversation message. Extra fields (name, tool_call_id, ...) are kept."""

    model_config = ConfigDict(extra="allow", frozen=True)

    role: str
    content: str


class ChatRequest(BaseModel):
    """Payload for chat completion.

    - messages: Non-empty list of messages with role and content
    - model: Optional Groq model name (defaults to DEFAULT_MODEL)
    - temperature / top_p / max_tokens: Optional sampling controls
    - Any other field is passed through to the Groq API untouched
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    messages: List[ChatMessage]
    model: Optional[str] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    max_tokens: Optional[int] = None

    def to_completion_params(self) -> Dict[str, Any]:
        """Keyword arguments for ``GroqService.create_chat_completion``."""
        return self.model_dump(exclude_unset=True)


class ModelInfo(BaseModel):
    """Description of a model the proxy can route to."""

    id: str
    name: str
    description: Optional[str] = None


class ModelsResponse(BaseModel):
    models: List[ModelInfo]
    count: int
    timestamp: str

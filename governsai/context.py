"""
GovernsAI SDK - Context memory.

Stores and retrieves agent context (messages, decisions, tool results)
with semantic search across agents and conversations.
"""

import logging
from typing import Any, Optional, Union

from .base import FeatureClient
from .exceptions import ContextError, GovernsAIError
from .models import (
    ContentType,
    ContextSaveInput,
    ContextSearchResult,
    ConversationItem,
    ConversationSummary,
    PrecheckResponse,
)
from .utils import build_query_params

logger = logging.getLogger("governsai.context")

SAVE_ACTION = "context.save"


class ContextClient(FeatureClient):
    """Client for context memory."""

    error_cls = ContextError

    async def save_context_explicit(self, entry: ContextSaveInput) -> Optional[str]:
        """Save ``entry`` as-is; returns the new context id."""
        logger.debug(
            "Saving context for agent %s (%s)", entry.agent_id, ContentType(entry.content_type).value
        )
        data = await self._request(
            "POST", "/api/v1/context", "save context", body=entry.to_dict()
        )
        return data.get("contextId")

    async def store_context(self, entry: ContextSaveInput) -> Optional[str]:
        """Save ``entry`` after the platform has prechecked its content."""
        logger.debug("Storing context for agent %s", entry.agent_id)
        data = await self._request(
            "POST", "/api/v1/context", "store context", body=entry.to_dict()
        )
        return data.get("contextId")

    async def search_context(
        self,
        query: str,
        agent_id: Optional[str] = None,
        content_types: Optional[list[Union[str, ContentType]]] = None,
        conversation_id: Optional[str] = None,
        scope: Optional[str] = None,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> list[ContextSearchResult]:
        body: dict[str, Any] = {"query": query}
        optional = {
            "agentId": agent_id,
            "contentTypes": [ContentType(t).value for t in content_types]
            if content_types
            else None,
            "conversationId": conversation_id,
            "scope": scope,
            "limit": limit,
            "threshold": threshold,
        }
        body.update({k: v for k, v in optional.items() if v is not None})
        data = await self._request(
            "POST", "/api/v1/context/search", "search context", body=body
        )
        return [ContextSearchResult.from_dict(item) for item in data.get("results", [])]

    async def search_cross_agent(
        self,
        query: str,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
        scope: Optional[str] = None,
    ) -> list[ContextSearchResult]:
        """Search context saved by any agent of the user or organization."""
        return await self.search_context(query, scope=scope, limit=limit, threshold=threshold)

    async def get_or_create_conversation(
        self, agent_id: str, agent_name: str, title: Optional[str] = None
    ) -> ConversationSummary:
        body = {"agentId": agent_id, "agentName": agent_name}
        if title:
            body["title"] = title
        data = await self._request(
            "POST", "/api/v1/context/conversation", "get or create conversation", body=body
        )
        return ConversationSummary.from_dict(data)

    async def get_conversation_context(
        self,
        conversation_id: str,
        agent_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[ConversationItem]:
        data = await self._request(
            "GET",
            f"/api/v1/context/conversation/{conversation_id}",
            "get conversation context",
            params=build_query_params({"agentId": agent_id, "limit": limit}),
        )
        return [ConversationItem.from_dict(item) for item in data.get("items", [])]

    async def get_recent_context(
        self,
        user_id: Optional[str] = None,
        limit: int = 20,
        scope: Optional[str] = None,
    ) -> list[ContextSearchResult]:
        """Most recent context entries, newest first."""
        data = await self._request(
            "GET",
            "/api/v1/context/recent",
            "get recent context",
            params=build_query_params({"userId": user_id, "limit": limit, "scope": scope}),
        )
        return [ContextSearchResult.from_dict(item) for item in data.get("results", [])]

    async def maybe_save_from_precheck(
        self,
        precheck: PrecheckResponse,
        agent_id: str,
        fallback_content: Optional[str] = None,
        agent_name: Optional[str] = None,
        conversation_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        scope: Optional[str] = None,
        visibility: Optional[str] = None,
    ) -> Optional[str]:
        """
        Save context when the precheck asked for it.

        The precheck asks through ``intent.save`` or a ``context.save``
        suggested action. Returns the new context id, or None when nothing
        was saved. Never raises on a platform error.
        """
        wants_save = bool(precheck.intent and precheck.intent.get("save") is True)
        action = next((a for a in precheck.suggested_actions if a.type == SAVE_ACTION), None)
        if not wants_save and action is None:
            return None

        content = (action.content if action else None) or fallback_content
        if not content:
            content = "\n".join(
                str(m.get("content", "")) for m in precheck.messages if m.get("content")
            )
        if not content or not content.strip():
            return None

        combined = dict(action.metadata if action else {})
        combined.update(metadata or {})
        entry = ContextSaveInput(
            content=content,
            content_type=ContentType.USER_MESSAGE,
            agent_id=agent_id,
            agent_name=agent_name,
            conversation_id=conversation_id,
            correlation_id=correlation_id,
            metadata=combined,
            scope=scope,
            visibility=visibility,
        )
        try:
            return await self.store_context(entry)
        except GovernsAIError as e:
            logger.error("Saving context from precheck failed: %s", e)
            return None

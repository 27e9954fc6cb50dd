"""Services module - provides external service integrations."""

from .assistant_client import AssistantClient, AssistantError

__all__ = ['AssistantClient', 'AssistantError']

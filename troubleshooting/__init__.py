"""Agent loop for natural-language Kubernetes troubleshooting."""
from troubleshooting.conversation import ConversationState
from troubleshooting.loop import AgentLoop, ToolClient

__all__ = ["AgentLoop", "ConversationState", "ToolClient"]

from .conversation import ConversationMemory, ConversationMemoryManager

__all__ = ["ConversationMemory", "ConversationMemoryManager"]

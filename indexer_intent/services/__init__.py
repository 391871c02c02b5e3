from .chat_service import ChatService, JobSubmitter

__all__ = ["ChatService", "JobSubmitter"]

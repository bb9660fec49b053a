"""
Application Queries (CQRS Read Side)

Query objects and their handlers for read operations.
Queries never change the system state.
"""

from discord_jukebox.application.queries.get_queue import GetQueueHandler, GetQueueQuery, QueueInfo

__all__ = [
    "GetQueueQuery",
    "GetQueueHandler",
    "QueueInfo",
]

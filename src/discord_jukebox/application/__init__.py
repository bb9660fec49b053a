"""
Application Layer

Contains use cases, command/query handlers, and application services.
This layer orchestrates domain objects and infrastructure to fulfill use cases.

Structure:
- commands/: CQRS write operations (PlayTrackCommand)
- queries/: CQRS read operations (GetQueueQuery)
- services/: Playback orchestration and track resolution
- interfaces/: Port interfaces for infrastructure adapters
"""

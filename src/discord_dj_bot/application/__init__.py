"""
Application Layer

Orchestrates domain objects and infrastructure ports.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- services/: The playback engine
"""

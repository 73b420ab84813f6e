"""
Application Layer

Orchestrates domain objects and infrastructure ports to fulfil use cases.

Structure:
- interfaces/: Port interfaces for infrastructure adapters
- services/: Session registry, queue, resolver, coordinator and skip votes
"""

"""
Application Layer

Contains the use cases of the bot and the ports they depend on.

Structure:
- commands/: Command and result models for play, skip, and clear
- services/: Session orchestration and the two teardown watchers
- interfaces/: Port interfaces for infrastructure adapters
"""

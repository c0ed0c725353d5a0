"""Python runtime installer for Ubuntu/WSL (Python-first, state-driven).

Core design goals:
- Never touch the system python3
- Idempotent steps (shims and profile edits are safe to repeat)
- Explicit host handle instead of ambient environment
- Escalating install strategies instead of blind retries
- Centralized logging
"""

__all__ = []

"""Core shell installer (Python-first, guard-driven).

Core design goals:
- Ordered, strictly sequential steps
- Idempotent steps gated by existence checks
- Fail fast on fatal steps, warn on optional ones
- One log file per run, full command output captured
"""

__all__ = []

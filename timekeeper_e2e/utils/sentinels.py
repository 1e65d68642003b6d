from __future__ import annotations


class _NotProvided:
    """Marks a builder argument the caller did not pass."""

    def __repr__(self):
        return "NotProvided"

    def __bool__(self):
        return False


NotProvided = _NotProvided()

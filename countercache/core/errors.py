from __future__ import annotations


class CounterCacheError(Exception):
    pass


class DescriptorError(CounterCacheError):
    """A counter descriptor is malformed or inconsistent."""


class UnknownJobError(CounterCacheError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown counter job: {name}")
        self.name = name


class StatementError(CounterCacheError):
    """The store rejected a statement; the rest of the job was not run."""

    def __init__(self, *, job: str, index: int, statement: str, reason: str) -> None:
        super().__init__(f"{job}: statement #{index} failed: {reason}")
        self.job = job
        self.index = index
        self.statement = statement
        self.reason = reason


class OrphanCleanupError(CounterCacheError):
    def __init__(self, *, table: str, reason: str) -> None:
        super().__init__(f"Could not drop {table}: {reason}")
        self.table = table
        self.reason = reason

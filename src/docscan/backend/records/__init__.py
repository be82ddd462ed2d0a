from .memory import MemoryRecordStore

__all__ = ["MemoryRecordStore", "SqlRecordStore"]


def __getattr__(name: str):
    if name == "SqlRecordStore":
        from .sql import SqlRecordStore

        return SqlRecordStore
    raise AttributeError(name)

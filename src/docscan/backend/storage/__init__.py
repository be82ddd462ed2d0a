from .memory import MemoryStorage

__all__ = ["MemoryStorage", "S3Storage"]


def __getattr__(name: str):
    # aioboto3 is only imported when the S3 backend is actually requested
    if name == "S3Storage":
        from .s3 import S3Storage

        return S3Storage
    raise AttributeError(name)

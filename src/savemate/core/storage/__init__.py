"""Storage abstractions: password reset tokens and deal images."""

from .blob_storage import BlobRejected, BlobStore, LocalBlobStore
from .reset_token_storage import (
    InMemoryResetTokenStore,
    RedisResetTokenStore,
    ResetTokenRecord,
    ResetTokenStore,
    create_reset_token_store,
)

__all__ = [
    "BlobRejected",
    "BlobStore",
    "InMemoryResetTokenStore",
    "LocalBlobStore",
    "RedisResetTokenStore",
    "ResetTokenRecord",
    "ResetTokenStore",
    "create_reset_token_store",
]

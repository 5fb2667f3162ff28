"""Rate limiting primitives for outbound IRC traffic."""

from .rate_limiter import RateBucket, get_bucket, reset_buckets

__all__ = ["RateBucket", "get_bucket", "reset_buckets"]

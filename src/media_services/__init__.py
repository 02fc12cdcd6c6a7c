"""
Media Services client: transient fault handling.

Every operation the client sends to the media platform (entity saves,
OData queries, blob transfers, plain web requests) runs through a retry
policy that:
- Classifies failures as transient or fatal per operation kind
- Waits between attempts using a fixed, incremental or exponential backoff
- Surfaces the original exception when retries are exhausted

Architecture: error detection strategies + backoff strategies + MediaRetryPolicy
"""

__version__ = "0.1.0"

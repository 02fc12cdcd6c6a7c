"""
Unit tests for the media services client.

Test individual components in isolation:
- Error detection strategies (every status, code and error category)
- Backoff strategies (delays, attempt accounting, validation)
- Retry policy execution (sync, async, adapters, cancellation)
- Policy factory and storage retry bridge
- httpx error translation
"""

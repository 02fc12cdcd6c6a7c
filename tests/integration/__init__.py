"""
Integration tests for the media services client.

Test components together over an in-process httpx transport:
- Account endpoint resolution under the web request retry policy
- Retry policies driving real httpx clients
"""

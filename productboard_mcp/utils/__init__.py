"""
Utility helpers

- retry: bounded retry loop with exponential backoff
- text: HTML stripping and truncation for tool output
"""

"""
Case intake service

Accepts referral case payloads over HTTP and records each one as a page in a
Notion database.
"""

__version__ = "0.1.0"

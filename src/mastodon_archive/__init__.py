"""
Mastodon Archive - Incremental local archive of a Mastodon account

A Python tool for mirroring a user's public Mastodon posts into a JSON
cache that static site builds can read, fetching the full history once
and only new posts afterwards.
"""

__version__ = "0.1.0"
__author__ = "Hossain Khan"
__email__ = "hello@hossain.dev"
__license__ = "MIT"

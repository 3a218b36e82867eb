"""
teamsched: team task scheduling service.

The scheduling rules live in teamsched.engine; teamsched.api and
teamsched.storage are the HTTP and SQLite layers around them.
"""

__version__ = "0.1.0"

"""
Worknest Backend - multi-tenant workspace service

Users sign in through an OAuth provider, own workspaces holding nested
folders and notes, and register external servers.

Version: 1.0.0
"""

__version__ = "1.0.0"

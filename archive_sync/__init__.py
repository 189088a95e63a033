"""
archive-sync: drop a socket.yml into every archived repository of a GitHub
organization and clear the matching Socket.dev repository records.
"""

__version__ = "0.1.0"

"""minftp: a minimal line-oriented FTP-like server and client.

One control connection carries a single request line; the server answers by
connecting back to the client on a data port and streaming either a directory
listing or a text file, one line at a time.

Only one client is served at a time.
"""

__all__ = []

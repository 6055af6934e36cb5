"""
HPOS Admin Auth

Authentication sidecar for the reverse proxy's auth_request subrequests:
answers 200 when an admin request carries a valid HP Admin signature and
401 otherwise.
"""

__version__ = "0.1.0"

"""Access app package.

The access control engine: role and tenant-scope checks every use case
runs before touching an aggregate, plus the request context they share.
"""

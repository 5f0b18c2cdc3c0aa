"""Reviews app package.

Guest reviews of attractions. Reviews start pending and are only shown
publicly once an admin of one of the attraction's tenants approves them.
"""

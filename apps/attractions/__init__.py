"""Attractions app package.

The catalog: attractions with their priced options, and destinations.
Attractions may be shared by several tenants; public listings only show
active items of the request tenant, admin listings follow the caller's
tenant scope.
"""

"""Tenants app package.

Tenants are the brands/storefronts of the marketplace. This app stores
them, resolves the tenant a request is made for, and serves per-tenant
statistics to the admins of that tenant.
"""

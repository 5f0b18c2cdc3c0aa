"""Users app package.

Platform accounts and their roles. Resolves bearer tokens into the caller's
Identity, and hosts the account flows: registration, login, invitations of
admin users, profile updates, deactivation and password resets.
"""

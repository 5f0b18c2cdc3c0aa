"""
Shared Kernel

Base classes and utilities shared by the catalog, booking, payment and
identity contexts: aggregates, value objects, domain errors, the store
interface, the unit of work and the message bus.
"""

"""
Service layer.

Each service encapsulates the business rules for one entity type on top
of the JSON snapshot stores in ``core.storage``.
"""

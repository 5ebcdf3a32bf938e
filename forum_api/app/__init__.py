"""
Application package.

``core`` holds configuration, storage and cross-cutting helpers,
``schemas`` the pydantic models, ``services`` the business logic,
``server`` the request dispatcher and TCP transport, and ``api`` the
HTTP bridge.  ``container`` wires them together.
"""

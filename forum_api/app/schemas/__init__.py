"""
Pydantic schema definitions.

Stored records (users, posts, comments), search results, and the
request/response envelopes with one body model per action.
"""

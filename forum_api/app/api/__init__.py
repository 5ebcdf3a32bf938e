"""
HTTP bridge routes, grouped by API version.
"""

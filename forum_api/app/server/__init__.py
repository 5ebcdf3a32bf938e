"""
Request dispatcher and the threaded TCP transport.
"""

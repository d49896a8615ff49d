"""
Per-domain repository modules for database access.

Functions take an explicit ``Session`` plus the caller's identity and never
read request state themselves.
"""

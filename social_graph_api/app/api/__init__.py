"""
API package: versioned routes, dependencies and error mapping.

A version subpackage exposes a top-level ``router`` which includes all
of its domain endpoints.
"""

"""
Version 1 of the API.

Breaking changes to the REST surface belong in a new version
subpackage (e.g. ``v2``) so existing clients keep working.
"""

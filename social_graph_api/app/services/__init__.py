"""
Service layer.

Each service encapsulates business logic for a domain and receives its
database connection at construction, so API handlers and tests decide
which database it talks to.
"""

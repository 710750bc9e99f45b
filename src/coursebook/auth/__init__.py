"""Authentication and authorization.

- password: bcrypt hashing and verification
- dependencies: the Authenticator (HTTP Basic → CurrentIdentity)
- guard: ownership checks for course mutations
"""

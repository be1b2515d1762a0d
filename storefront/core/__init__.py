"""
Core: configuration, database access, authentication, errors, rate limiting
"""

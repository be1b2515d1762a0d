"""
Service Layer - Business Logic

Services validate requests against the domain rules and call repositories.
"""

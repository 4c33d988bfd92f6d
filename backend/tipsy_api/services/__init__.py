"""
Application services: permissions, reference lookups and domain services.
"""

"""
TIPSY REST API package.
"""

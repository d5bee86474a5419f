"""
Shared API Layer
================

HTTP concerns common to every router: actor resolution, correlation IDs,
request logging and error translation.
"""

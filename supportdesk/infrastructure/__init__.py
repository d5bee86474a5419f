"""
Infrastructure
==============

Technical adapters shared by every bounded context (database engine and
sessions).
"""

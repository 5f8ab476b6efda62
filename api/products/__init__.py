"""
Products feature: catalog listing, lookup by id and creation.
"""

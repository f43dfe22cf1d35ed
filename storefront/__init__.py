"""
Storefront data API: one repository contract over Cosmos DB and SQL backends.
"""

"""
Contracts (data models).

This folder defines the shapes the catalog integration hands to callers:
- ProductRecord / SearchPage records built from PA-API responses
- SigningCredentials used to sign every request
- The CatalogError taxonomy every failure is mapped to

Both mock and real HTTP clients return these contracts.
"""

"""
Real HTTP integration clients.

These clients communicate with the product catalog service over HTTPS.

Important:
- Must implement the same interface as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
Build the client with ProductCatalogClient.from_env() once credentials are set;
use MockProductCatalogClient otherwise.
"""

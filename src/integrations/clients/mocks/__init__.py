"""
Mock integration clients.

These clients return fake (but realistic) PA-API responses without calling the
network. They are used when:
- Catalog credentials are not available
- We want to test callers end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients go through the same signing, classification and normalisation
  code as the real client; only the transport is replaced.
"""

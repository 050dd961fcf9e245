"""
Gigya Accounts - Customer identity service client

Authenticates outbound requests, retrieves account records in bulk and
verifies tokens signed by the service.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- Configuration is an immutable value passed at construction

Modules:
- auth: Request signing and authorization schemes
- transport: Network exchange with the service
- accounts: API client and cursor-based bulk retrieval
- tokens: RSA token verification
- extensions: Verified inbound extension calls
"""

__version__ = "1.0.0"

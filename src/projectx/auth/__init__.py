"""Authentication and role policy.

Learn: identity is established once per request, from a bearer JWT:
1. Users → email/password → signed access token (1h, no refresh)
2. Every protected route → Authorization: Bearer <token> → Identity

The token is trusted for its whole lifetime. There is no server-side
session store, so a role change or user deletion only takes effect when
the user's current token expires.
"""

"""idlink: sign in with third-party OAuth2/OIDC identity providers."""

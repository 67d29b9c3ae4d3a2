"""
Security helpers for the web app.

State generation for CSRF protection of the OAuth redirect, constant-time
comparison of returned state, and the standard security headers applied to
every response.
"""

import secrets


class TokenGenerator:
    """Random values used during the login flow."""

    @staticmethod
    def generate_state() -> str:
        """
        Generate the OAuth state parameter.

        Returns:
            str: URL-safe random string (~22 characters)
        """
        return secrets.token_urlsafe(16)


def states_match(expected: str, received: str) -> bool:
    """Compare the stored and returned state in constant time."""
    if not expected or not received:
        return False
    return secrets.compare_digest(expected.encode('utf-8'), received.encode('utf-8'))


class SecurityHeaders:
    """
    Security headers for HTTP responses.

    Provides standard security headers to protect against
    common web vulnerabilities.
    """

    @staticmethod
    def get_security_headers() -> dict:
        """
        Get security headers applied to every response.

        Returns:
            dict: Dictionary of security headers
        """
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'X-XSS-Protection': '1; mode=block',
            'Cache-Control': 'no-cache, no-store, must-revalidate',
            'Pragma': 'no-cache',
            'Expires': '0'
        }

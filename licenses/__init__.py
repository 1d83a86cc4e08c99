"""
Licenses module - signed license keys.

This module handles:
- LicenseKey value and its wire format
- Signing and verifying keys with the vendor's RSA key pair
"""

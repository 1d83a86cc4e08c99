"""
Orders module - bank-transfer orders for license keys.

This module handles:
- Order entity and its PENDING -> COMPLETED lifecycle
- Payment matching for the transfer webhook
- Fulfillment: signing a license key once and delivering it
- Administrator approval, deletion and resend
"""

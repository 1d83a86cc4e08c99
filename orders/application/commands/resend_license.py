"""
ResendLicenseCommand.

Command to deliver the stored license key of a completed order again.
"""

from dataclasses import dataclass


@dataclass
class ResendLicenseCommand:
    """Command to resend a license key."""

    order_id: str

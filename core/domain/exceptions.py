"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class OrderException(DomainException):
    """Base exception for order-related errors."""

    pass


class OrderValidationError(OrderException):
    """Raised when order input is malformed or missing."""

    def __init__(self, message: str = "Invalid order data", code: str = "VALIDATION_ERROR"):
        super().__init__(message, code=code)


class InvalidLicenseTypeError(OrderValidationError):
    """Raised when an entitlement type is not one of M, Y, P."""

    def __init__(self, message: str = "Invalid license type"):
        super().__init__(message, code="INVALID_LICENSE_TYPE")


class InvalidMachineIdError(OrderValidationError):
    """Raised when a machine identifier is missing or too short."""

    def __init__(self, message: str = "Invalid machine identifier"):
        super().__init__(message, code="INVALID_MACHINE_ID")


class InvalidAmountError(OrderValidationError):
    """Raised when an amount is missing or not positive."""

    def __init__(self, message: str = "Amount must be greater than zero"):
        super().__init__(message, code="INVALID_AMOUNT")


class OrderNotFoundError(OrderException):
    """Raised when an order is not found."""

    def __init__(self, message: str = "Order not found"):
        super().__init__(message, code="ORDER_NOT_FOUND")


class OrderAlreadyExistsError(OrderException):
    """Raised when an order id is already taken."""

    def __init__(self, message: str = "Order already exists"):
        super().__init__(message, code="ORDER_ALREADY_EXISTS")


class OrderAlreadyCompletedError(OrderException):
    """Raised when a completed order is asked to complete again."""

    def __init__(self, message: str = "Order is already completed"):
        super().__init__(message, code="ORDER_ALREADY_COMPLETED")


class OrderNotCompletedError(OrderException):
    """Raised when an operation needs a completed order."""

    def __init__(self, message: str = "Order is not completed"):
        super().__init__(message, code="ORDER_NOT_COMPLETED")


class OrderLockTimeoutError(OrderException):
    """Raised when the per-order lock cannot be acquired in time."""

    def __init__(self, message: str = "Order is busy, try again later"):
        super().__init__(message, code="ORDER_LOCK_TIMEOUT")


class OrderStoreError(OrderException):
    """Raised when the order store cannot complete an operation."""

    def __init__(self, message: str = "Order store unavailable", code: str = "ORDER_STORE_ERROR"):
        super().__init__(message, code=code)


class StoreCorruptionError(OrderStoreError):
    """Raised when persisted order data cannot be read back."""

    def __init__(self, message: str = "Order store data is corrupted"):
        super().__init__(message, code="STORE_CORRUPTION")


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class ConfigurationError(LicenseException):
    """Raised when required server configuration is missing."""

    def __init__(self, message: str = "Service is not configured", code: str = "CONFIGURATION_ERROR"):
        super().__init__(message, code=code)


class SigningKeyNotConfiguredError(ConfigurationError):
    """Raised when a license must be signed but no private key is loaded."""

    def __init__(self, message: str = "License signing key is not configured"):
        super().__init__(message, code="SIGNING_KEY_NOT_CONFIGURED")


class InvalidLicenseKeyError(LicenseException):
    """Raised when a license key string cannot be parsed."""

    def __init__(self, message: str = "Invalid license key"):
        super().__init__(message, code="INVALID_LICENSE_KEY")


class NotificationError(DomainException):
    """Raised when a license key could not be delivered."""

    def __init__(self, message: str = "License notification failed"):
        super().__init__(message, code="NOTIFICATION_FAILED")

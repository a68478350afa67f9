"""Custom exceptions for SafeURL with user-friendly messages."""


class SafeURLError(Exception):
    """Base exception for SafeURL errors."""

    def __init__(self, message: str, user_hint: str | None = None):
        self.message = message
        self.user_hint = user_hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.user_hint:
            return f"{self.message}\n  Hint: {self.user_hint}"
        return self.message


class InvalidCIDRError(SafeURLError, ValueError):
    """A configured range is not valid CIDR notation."""

    def __init__(self, value: str, reason: str | None = None):
        self.value = value
        message = f"Invalid CIDR range '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            user_hint="Use network/prefix notation with no host bits set, e.g. 10.0.0.0/8",
        )


class ConfigurationError(SafeURLError):
    """Validation options could not be built."""

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(
            message=f"Invalid option {field}: {reason}",
            user_hint=f"Check the {field} setting",
        )


class DNSResolutionError(SafeURLError):
    """Hostname could not be resolved to any address."""

    def __init__(self, hostname: str, reason: str | None = None):
        self.hostname = hostname
        message = f"Cannot resolve {hostname}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message=message)


class UnsafeURLError(SafeURLError):
    """Request refused because the destination URL failed validation."""

    def __init__(self, reason, url: str | None = None):
        self.reason = reason
        self.url = url
        label = getattr(reason, "value", reason)
        full_msg = f"Request blocked: {label}" + (f" (URL: {url})" if url else "")
        super().__init__(message=full_msg)

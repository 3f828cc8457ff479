"""
Exception classes for the HTTP signing SDK
"""

from typing import Optional, Dict, Any


class HttpSigningError(Exception):
    """Base exception for all HTTP signing SDK errors"""

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code: {self.error_code}, details: {self.details})"
        return f"{self.message} (code: {self.error_code})"


class ConfigurationError(HttpSigningError):
    """Exception raised for invalid signing configuration"""

    def __init__(self, message: str, error_code: str = "INVALID_CONFIG", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code, details)


class UnsupportedAlgorithmError(ConfigurationError):
    """Exception raised for hash or signing algorithms the SDK cannot use"""

    def __init__(self, algorithm: Any, kind: str = "algorithm"):
        super().__init__(
            f"Unsupported {kind}: {algorithm}",
            "UNSUPPORTED_ALGORITHM",
            {"algorithm": str(algorithm), "kind": kind}
        )
        self.algorithm = algorithm


class KeyLoadError(HttpSigningError):
    """Base exception for private key loading failures"""
    pass


class KeyFileNotFoundError(KeyLoadError):
    """Exception raised when the private key file does not exist"""

    def __init__(self, path: str):
        super().__init__(
            f"Private key file does not exist: {path}",
            "KEY_FILE_NOT_FOUND",
            {"path": str(path)}
        )
        self.path = str(path)


class UnsupportedKeyTypeError(KeyLoadError):
    """Exception raised when the key armor or algorithm is not supported"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "UNSUPPORTED_KEY_TYPE", details)


class KeyDecryptionError(KeyLoadError):
    """Exception raised for a wrong passphrase or corrupt encrypted key data"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "KEY_DECRYPTION_FAILED", details)


class KeyParseError(KeyLoadError):
    """Exception raised for malformed ASN.1/DER key structures"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "KEY_PARSE_FAILED", details)


class HeaderNotFoundError(HttpSigningError):
    """Exception raised when a header selected for signing is absent from the request"""

    def __init__(self, header: str, available_headers: Optional[list] = None):
        super().__init__(
            f"Cannot sign HTTP request. Request does not contain the {header} header.",
            "HEADER_NOT_FOUND",
            {"header": header, "available_headers": list(available_headers or [])}
        )
        self.header = header

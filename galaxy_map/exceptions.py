"""
Exception hierarchy for the Galaxy Map backend.

Every failure that reaches the HTTP boundary is classified as either a
client-caused ValidationError (400) or a server-caused InternalError (500).
AssetNotFoundError is the one "empty" outcome of the map asset lookup (404).
"""


class GalaxyMapError(Exception):
    """Base exception for all Galaxy Map service errors"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GalaxyMapError):
    """Raised when request coordinates are missing, incomplete or out of order"""
    pass


class InternalError(GalaxyMapError):
    """Raised when a collaborator (row store, filesystem) fails"""

    def __init__(self, message: str, operation: str = None):
        super().__init__(message)
        self.operation = operation


class AssetNotFoundError(GalaxyMapError):
    """Raised when no map image exists for a sector and hex label"""

    def __init__(self, sector_x: int, sector_y: int, hex_label: str):
        message = f"No map asset for sector ({sector_x}, {sector_y}) hex {hex_label}"
        super().__init__(message)
        self.sector_x = sector_x
        self.sector_y = sector_y
        self.hex_label = hex_label


class ConfigurationError(GalaxyMapError):
    """Raised when service configuration is invalid"""

    def __init__(self, config_field: str, reason: str):
        message = f"Configuration error in {config_field}: {reason}"
        super().__init__(message)
        self.config_field = config_field
        self.reason = reason

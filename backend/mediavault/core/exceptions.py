"""
Custom exception classes for the MediaVault application.
"""

from typing import Any, Dict, List, Optional


class MediaVaultException(Exception):
    """Base exception for MediaVault application."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Error message
            status_code: HTTP status code
            error_code: Application-specific error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class NotFoundError(MediaVaultException):
    """Resource not found error."""

    def __init__(self, resource: str, resource_id: Any):
        """
        Initialize not found error.

        Args:
            resource: Resource type (e.g., "Studio", "Label")
            resource_id: Resource identifier
        """
        super().__init__(
            message=f"{resource} with id '{resource_id}' not found",
            status_code=404,
            error_code="RESOURCE_NOT_FOUND",
            details={"resource": resource, "resource_id": str(resource_id)},
        )


class LabelNotFoundError(NotFoundError):
    """Label not found error."""

    def __init__(self, label_id: str):
        super().__init__(resource="Label", resource_id=label_id)


class StudioNotFoundError(NotFoundError):
    """Studio not found error."""

    def __init__(self, studio_id: str):
        super().__init__(resource="Studio", resource_id=studio_id)


class ValidationError(MediaVaultException):
    """Validation error."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field that failed validation
            value: Invalid value
        """
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details,
        )


class HookExecutionError(MediaVaultException):
    """A studio plugin hook failed."""

    def __init__(
        self,
        message: str,
        event: Optional[str] = None,
        plugin: Optional[str] = None,
        failed_ids: Optional[List[str]] = None,
        updated_ids: Optional[List[str]] = None,
    ):
        """
        Initialize hook execution error.

        Args:
            message: Error message
            event: Hook event that was running
            plugin: Name of the plugin that failed
            failed_ids: Studio ids whose hook run failed
            updated_ids: Studio ids of the same batch that were updated
        """
        details: Dict[str, Any] = {}
        if event:
            details["event"] = event
        if plugin:
            details["plugin"] = plugin
        if failed_ids:
            details["failed_ids"] = failed_ids
        if updated_ids is not None:
            details["updated_ids"] = updated_ids

        super().__init__(
            message=message,
            status_code=502,
            error_code="HOOK_EXECUTION_ERROR",
            details=details,
        )
        self.event = event
        self.plugin = plugin
        self.failed_ids = failed_ids or []
        self.updated_ids = updated_ids or []


class CascadeSideEffectError(MediaVaultException):
    """A side effect failed after the primary mutation was stored."""

    def __init__(self, message: str, stage: str, studio_id: Optional[str] = None):
        """
        Initialize cascade side effect error.

        Args:
            message: Error message
            stage: Side effect that failed (e.g. "propagate", "match")
            studio_id: Studio the side effect ran for
        """
        details = {"stage": stage}
        if studio_id:
            details["studio_id"] = studio_id

        super().__init__(
            message=message,
            status_code=500,
            error_code="CASCADE_SIDE_EFFECT_ERROR",
            details=details,
        )
        self.stage = stage
        self.studio_id = studio_id


class ConfigurationError(MediaVaultException):
    """Configuration error."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that has issue
        """
        details = {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(
            message=message,
            status_code=500,
            error_code="CONFIGURATION_ERROR",
            details=details,
        )

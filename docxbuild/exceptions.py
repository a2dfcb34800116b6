"""Custom exceptions for docxbuild."""

from typing import Any, Dict, Optional


class DocxBuildError(Exception):
    """Base exception for docxbuild errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        location: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.location = location

    def get_error_info(self) -> Dict[str, Any]:
        """Return the error as a plain dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "location": self.location,
        }

    def __str__(self) -> str:
        text = self.message
        if self.location:
            text = f"{text} (at {self.location})"
        if self.details:
            text = f"{text}: {self.details}"
        return text


class StructureError(DocxBuildError):
    """Exception raised when the document model is built in an invalid shape."""

    pass


class AssetError(DocxBuildError):
    """Exception raised when an embedded asset cannot be encoded."""

    pass


class PackagingError(DocxBuildError):
    """Exception raised while assembling or writing the package."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        location: Optional[str] = None,
        part_name: Optional[str] = None,
    ):
        super().__init__(message, details=details, location=location)
        self.part_name = part_name

    def get_error_info(self) -> Dict[str, Any]:
        info = super().get_error_info()
        info["part_name"] = self.part_name
        return info

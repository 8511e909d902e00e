"""
Custom exceptions for RatioLens.

Provides a hierarchy of exceptions with error codes for consistent error handling.
"""
from typing import Any, Dict, List, Optional


class RatioLensError(Exception):
    """
    Base exception for all RatioLens errors.

    Attributes:
        error_code: Unique error code (e.g., RL-101)
        message: Human-readable error message
        details: Additional error context
    """
    error_code: str = "RL-000"
    http_status: int = 500

    def __init__(
        self,
        message: str = "Произошла ошибка при обработке файла",
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
    ):
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# Document Processing Errors (RL-1XX)
class DocumentProcessingError(RatioLensError):
    """Error during document processing."""
    error_code = "RL-100"
    http_status = 422

    def __init__(self, message: str = "Не удалось прочитать документ. Проверьте формат данных.", **kwargs):
        super().__init__(message, **kwargs)


class DecodeError(DocumentProcessingError):
    """Container could not be decoded into lines or rows."""
    error_code = "RL-101"

    def __init__(self, reason: str, content_type: Optional[str] = None, **kwargs):
        message = f"Ошибка парсинга документа: {reason}"
        details = {"reason": reason, "content_type": content_type}
        super().__init__(message, details=details, **kwargs)
        self.reason = reason


class UnsupportedDocumentError(DocumentProcessingError):
    """Document has no extractable text (e.g. an image-only scan)."""
    error_code = "RL-102"

    GUIDANCE = (
        "Документ не содержит извлекаемого текста (вероятно, это скан). "
        "Распознавание изображений не поддерживается: загрузите Excel (.xlsx, .xls), "
        "Word (.docx) или PDF с текстовым слоем."
    )

    def __init__(self, message: Optional[str] = None, **kwargs):
        super().__init__(message or self.GUIDANCE, **kwargs)


class InvalidFileTypeError(RatioLensError):
    """Invalid file type uploaded."""
    error_code = "RL-103"
    http_status = 400

    def __init__(self, content_type: str, expected_types: list, **kwargs):
        message = "Только Excel (.xlsx, .xls), CSV, Word (.docx), PDF и текстовые файлы разрешены"
        super().__init__(
            message,
            details={"content_type": content_type, "expected_types": expected_types},
            **kwargs,
        )


class FileTooLargeError(RatioLensError):
    """File exceeds maximum size limit."""
    error_code = "RL-104"
    http_status = 413

    def __init__(self, size: int, max_size: int, **kwargs):
        message = f"Размер файла превышает {max_size // (1024 * 1024)} МБ"
        super().__init__(message, details={"size": size, "max_size": max_size}, **kwargs)


# Extraction Errors (RL-2XX)
class ExtractionError(RatioLensError):
    """Error while turning document text into a financial record."""
    error_code = "RL-200"
    http_status = 422

    def __init__(self, message: str = "Не удалось извлечь финансовые данные", **kwargs):
        super().__init__(message, **kwargs)


class RequiredFieldMissingError(ExtractionError):
    """A required canonical field matched no label of the document."""
    error_code = "RL-201"

    def __init__(
        self,
        field: str,
        synonyms: List[str],
        found_labels: List[str],
        total_found: Optional[int] = None,
        **kwargs,
    ):
        total = len(found_labels) if total_found is None else total_found
        primary = synonyms[0] if synonyms else field
        suffix = "..." if total > len(found_labels) else ""
        message = (
            f'Не найдено обязательное поле: "{primary}". '
            f"Попробуйте использовать одно из этих названий: {', '.join(synonyms)}. "
            f"Найденные поля в файле: {', '.join(found_labels)}{suffix}"
        )
        details = {
            "field": field,
            "suggested_synonyms": synonyms,
            "found_labels": found_labels,
            "found_total": total,
        }
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.synonyms = synonyms
        self.found_labels = found_labels


# Analysis Errors (RL-3XX)
class AnalysisNotFoundError(RatioLensError):
    """Analysis not found in the in-process store."""
    error_code = "RL-300"
    http_status = 404

    def __init__(self, analysis_id: str, **kwargs):
        message = "Анализ не найден"
        super().__init__(message, details={"analysis_id": analysis_id}, **kwargs)


# Validation Errors (RL-7XX)
class ValidationError(RatioLensError):
    """Input validation failed."""
    error_code = "RL-700"
    http_status = 400

    def __init__(self, message: str = "Validation failed", errors: list = None, **kwargs):
        details = kwargs.pop("details", {})
        details["errors"] = errors or []
        super().__init__(message, details=details, **kwargs)


# External Service Errors (RL-9XX)
class ExternalServiceError(RatioLensError):
    """External service call failed."""
    error_code = "RL-900"
    http_status = 502

    def __init__(self, service_name: str, message: str = None, **kwargs):
        msg = message or f"External service '{service_name}' is unavailable"
        super().__init__(msg, details={"service": service_name}, **kwargs)

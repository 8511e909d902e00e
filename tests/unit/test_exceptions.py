"""
Unit tests for custom exceptions.

Tests exception hierarchy and error formatting.
"""
import pytest

from ratiolens.exceptions import (
    AnalysisNotFoundError,
    DecodeError,
    DocumentProcessingError,
    ExternalServiceError,
    ExtractionError,
    FileTooLargeError,
    InvalidFileTypeError,
    RatioLensError,
    RequiredFieldMissingError,
    UnsupportedDocumentError,
    ValidationError,
)


class TestExceptionHierarchy:
    """Tests for exception class hierarchy."""

    def test_base_exception(self):
        exc = RatioLensError("Test error")

        assert exc.error_code == "RL-000"
        assert exc.message == "Test error"
        assert exc.http_status == 500

    def test_document_processing_error(self):
        """Test DocumentProcessingError inherits correctly."""
        exc = DocumentProcessingError("Broken file")

        assert isinstance(exc, RatioLensError)
        assert exc.error_code == "RL-100"
        assert exc.http_status == 422

    def test_decode_error(self):
        exc = DecodeError("File is not a zip file", content_type="application/pdf")

        assert isinstance(exc, DocumentProcessingError)
        assert exc.error_code == "RL-101"
        assert exc.message == "Ошибка парсинга документа: File is not a zip file"
        assert exc.details["content_type"] == "application/pdf"

    def test_unsupported_document_has_guidance(self):
        exc = UnsupportedDocumentError()

        assert isinstance(exc, DocumentProcessingError)
        assert exc.error_code == "RL-102"
        assert "Excel" in exc.message

    def test_extraction_error(self):
        exc = ExtractionError()

        assert exc.error_code == "RL-200"
        assert exc.http_status == 422

    def test_analysis_not_found(self):
        exc = AnalysisNotFoundError("abc")

        assert exc.http_status == 404
        assert exc.details == {"analysis_id": "abc"}


class TestUploadErrors:
    def test_invalid_file_type(self):
        exc = InvalidFileTypeError("image/png", [".xlsx", ".pdf"])

        assert exc.error_code == "RL-103"
        assert exc.http_status == 400
        assert exc.details["expected_types"] == [".xlsx", ".pdf"]

    def test_file_too_large(self):
        exc = FileTooLargeError(size=11 * 1024 * 1024, max_size=10 * 1024 * 1024)

        assert exc.error_code == "RL-104"
        assert exc.http_status == 413
        assert "10 МБ" in exc.message


class TestRequiredFieldMissingError:
    def test_message_names_first_synonym(self):
        exc = RequiredFieldMissingError(
            field="total_assets",
            synonyms=["баланс", "активы баланс", "всего активов"],
            found_labels=["Запасы", "Денежные средства"],
        )

        assert isinstance(exc, ExtractionError)
        assert exc.error_code == "RL-201"
        assert exc.message.startswith('Не найдено обязательное поле: "баланс"')
        assert "Запасы, Денежные средства" in exc.message
        assert not exc.message.endswith("...")
        assert exc.details["found_total"] == 2

    def test_truncated_labels(self):
        exc = RequiredFieldMissingError("inventory", ["запасы"], ["a", "b"], total_found=40)

        assert exc.message.endswith("...")
        assert exc.details["found_total"] == 40


class TestValidationError:
    """Tests for ValidationError."""

    def test_validation_error_basic(self):
        exc = ValidationError("Invalid input")

        assert isinstance(exc, RatioLensError)
        assert exc.error_code == "RL-700"
        assert exc.http_status == 400
        assert exc.details["errors"] == []

    def test_validation_error_with_errors(self):
        """Test ValidationError with field errors."""
        exc = ValidationError(
            message="Некорректные финансовые данные",
            errors=[
                {"field": "equity", "message": "Input should be greater than 0"},
                {"field": "inventory", "message": "Input should be greater than or equal to 0"},
            ],
        )

        assert len(exc.details["errors"]) == 2


class TestExceptionDetails:
    """Tests for exception details handling."""

    def test_custom_details(self):
        exc = DocumentProcessingError(message="PDF failed", details={"page": 5, "reason": "corrupt"})

        assert exc.details["page"] == 5
        assert exc.details["reason"] == "corrupt"

    def test_to_dict(self):
        data = ExternalServiceError("openai").to_dict()

        assert data == {
            "error": True,
            "error_code": "RL-900",
            "message": "External service 'openai' is unavailable",
            "details": {"service": "openai"},
        }

    def test_exception_can_be_raised(self):
        """Test that exceptions can be raised and caught."""
        with pytest.raises(RatioLensError) as exc_info:
            raise UnsupportedDocumentError()

        assert exc_info.value.error_code == "RL-102"

"""Tests for custom exceptions."""

import errno

from chunkreader.exceptions import ConfigurationError, FileAccessError, FileModifiedError, ReaderStateError


class TestConfigurationError:
    """Test ConfigurationError exception."""

    def test_configuration_error_creation(self):
        error = ConfigurationError("chunk_size", 0, "must be > 0")

        assert error.field == "chunk_size"
        assert error.value == 0
        assert str(error) == "Invalid chunk_size: must be > 0, got 0"

    def test_configuration_error_is_value_error(self):
        assert isinstance(ConfigurationError("start_offset", -1, "must be >= 0"), ValueError)


class TestFileModifiedError:
    """Test FileModifiedError exception."""

    def test_file_modified_error_creation(self):
        file_path = "/path/to/data.bin"
        error = FileModifiedError(file_path)

        assert error.file_path == file_path
        assert str(error) == f"File '{file_path}' has been modified while processing"


class TestOtherExceptions:
    def test_reader_state_error(self):
        error = ReaderStateError("Handle already opened")
        assert str(error) == "Handle already opened"
        assert isinstance(error, RuntimeError)

    def test_file_access_error_keeps_native_classification(self):
        """Test that native filesystem errors are FileAccessErrors with errno intact."""
        error = FileNotFoundError(errno.ENOENT, "No such file or directory", "missing.bin")
        assert isinstance(error, FileAccessError)
        assert error.errno == errno.ENOENT
        assert issubclass(IsADirectoryError, FileAccessError)
        assert issubclass(PermissionError, FileAccessError)

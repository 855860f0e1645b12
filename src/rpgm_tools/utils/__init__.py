from .fs import (
    FileResult, FileSystemError, JsonFile, LocalFileSystem,
    check_path_exists, validate_required_files, read_json_files, read_json_file,
    write_json_file, read_jsonl_lines, write_jsonl_lines,
)
from .logger import (
    RpgmToolsError, FileOperationError, ProjectReadError, ConfigurationError,
    UnsupportedEngineError,
    TranslationLogger, get_logger, setup_logger, log_exceptions,
)

__all__ = [
    # filesystem
    "FileResult",
    "FileSystemError",
    "JsonFile",
    "LocalFileSystem",
    "check_path_exists",
    "validate_required_files",
    "read_json_files",
    "read_json_file",
    "write_json_file",
    "read_jsonl_lines",
    "write_jsonl_lines",
    # errors
    "RpgmToolsError",
    "FileOperationError",
    "ProjectReadError",
    "ConfigurationError",
    "UnsupportedEngineError",
    # logger
    "TranslationLogger",
    "get_logger",
    "setup_logger",
    "log_exceptions",
]

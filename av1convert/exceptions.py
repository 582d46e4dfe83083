"""Custom exceptions for the av1convert pipeline"""

class Av1ConvertError(Exception):
    """
    Base exception for all av1convert errors.

    Attributes:
        message (str): A description of the error.
        module (str): The module where the error originated.

    Usage:
        raise Av1ConvertError("An error occurred", module="encoder")
    """
    def __init__(self, message: str, module: str = None):
        self.message = message
        self.module = module or "unknown"
        super().__init__(f"[{self.module}] {self.message}")

class ProbeError(Av1ConvertError):
    """
    Raised when ffprobe fails or returns unusable metadata.

    The file is skipped; the rest of the batch continues.
    """
    def __init__(self, message: str, path=None, stderr: str = ""):
        super().__init__(message, module="probe")
        self.path = path
        self.stderr = stderr

class DirectoryError(Av1ConvertError):
    """Raised when the destination directory cannot be created."""

class LogCreateError(Av1ConvertError):
    """Raised when the encoder log file cannot be created."""

class EncodeError(Av1ConvertError):
    """
    Raised when ffmpeg cannot be launched or exits with a non-zero code.

    Attributes:
        exit_code (int): Process exit code, or None if the process never started.
    """
    def __init__(self, message: str, exit_code: int = None):
        super().__init__(message, module="encoder")
        self.exit_code = exit_code

class DestinationError(Av1ConvertError):
    """Raised when the chosen destination folder is not writable."""

class QueueError(Av1ConvertError):
    """Raised on an invalid queue operation."""

class StartupFatalError(Av1ConvertError):
    """
    Raised when the tool cannot run at all: ffmpeg/ffprobe are missing or
    the logs directory cannot be created.
    """

"""
Standard exit codes for mvc.

0 is a normal run, 1 a fatal argument or checkout-list error, 2 a fatal
filesystem condition.
"""
SUCCESS = 0              # Successful termination
CONFIG_ERROR = 1         # Bad arguments or checkout-list file
FILESYSTEM_ERROR = 2     # Required directory missing or uncreatable
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = CONFIG_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class UnknownActionError(CommandError):
    """Raised when the positional action matches no known action."""
    def __init__(self, action: str):
        super().__init__(f'Unrecognized action "{action}"', CONFIG_ERROR)
        self.action = action


class ConfigFormatError(CommandError):
    """Raised when a directory entry appears before any section header."""
    def __init__(self, filename: str, line_number: int):
        super().__init__(
            f"need root before directory at line {line_number} of file {filename}",
            CONFIG_ERROR,
        )
        self.filename = filename
        self.line_number = line_number


class CheckoutAlignmentError(CommandError):
    """Raised when a local directory and its remote path cannot be aligned."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DirectoryMissing(CommandError):
    """Raised when a directory exists but lacks its version control subdirectory."""
    def __init__(self, message: str):
        super().__init__(message, FILESYSTEM_ERROR)


class SearchDirectoryMissing(CommandError):
    """Raised when a directory to search for checkouts is not a directory."""
    def __init__(self, directory: str):
        super().__init__(
            f"Directory in which to search for checkouts is not a directory: {directory}",
            FILESYSTEM_ERROR,
        )
        self.directory = directory


class RepositoryRootUnavailable(CommandError):
    """Raised for an old Subversion working copy with no repository root."""
    def __init__(self, directory: str, url: str):
        super().__init__(
            f"Problem:  old svn working copy in {directory}\n"
            "Check it out again to get a 'Repository Root' entry in the svn info output.\n"
            f"  repoUrl = {url}",
            FILESYSTEM_ERROR,
        )
        self.directory = directory
        self.url = url


class ParentDirectoryUncreatable(CommandError):
    """Raised when the parent of a clone target cannot be created."""
    def __init__(self, directory: str):
        super().__init__(f"Could not create directory: {directory}", FILESYSTEM_ERROR)
        self.directory = directory

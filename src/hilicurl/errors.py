class UsageError(Exception):
    """
    Raised when the command line (or the run configuration built from it) is invalid.
    """

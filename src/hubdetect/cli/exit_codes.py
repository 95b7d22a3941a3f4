"""Process exit codes of the hubdetect CLI."""

EXIT_SUCCESS = 0
EXIT_DETECT_FAILED = 1  # detect ran but its exit code did not validate
EXIT_FETCH_ERROR = 2  # resolution, download, extraction or launch failure
EXIT_INVALID_USAGE = 3  # bad arguments or configuration
EXIT_INTERRUPTED = 130

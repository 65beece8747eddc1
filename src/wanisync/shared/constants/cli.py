"""
CLI Configuration Constants

Command names, defaults and help text of the command line interface.
"""


class CLIDefaults:
    """Default CLI values."""

    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    VERSION = "0.1.0"


class CLICommands:
    """Command names."""

    SYNC = "sync"
    LEECHES = "leeches"


class CLIHelp:
    """Help text."""

    APP_NAME = "wanisync"
    APP_DESCRIPTION = "Incremental WaniKani sync with a durable local cache."
    APP_STYLE = "rich"
    VERSION_TEXT = "WaniSync v{version}"
    SYNC_COLLECTIONS_HELP = "Collections to sync (default: review_statistics, assignments)."
    LEECHES_HELP = "List leech subjects from the cached review statistics."
    TOKEN_FILE_HELP = "Path to the JSON credential file."

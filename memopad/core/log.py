################################################################################################

'''

Copyright 2025 Aaron Vose (avose@aaronvose.net)

Licensed under the LGPL v2.1; see the file 'LICENSE' for details.

This file holds the process-wide memo store log.

'''

################################################################################################

import inspect
from datetime import datetime

################################################################################################

WARNING_TAG = "!WARNING!"

def _now() -> str:
    return datetime.now().strftime("%m/%d/%Y %H:%M:%S")

def _caller_file(depth: int) -> str:
    """Bare filename of the frame `depth` levels up from here."""
    stack = inspect.stack()
    if len(stack) > depth:
        return stack[depth].filename.replace('\\', '/').split('/')[-1]
    return "unknown"

class LogManager():
    __log = None

    def __init__(self, verbosity: int = 0):
        if LogManager.__log is None:
            LogManager.__log = [(_now(), "Begin MemoPad Log")]
        self.verbosity = verbosity

    def add(self, text: str):
        LogManager.__log.append((_now(), text))

    def debug(self, text: str, level: int = 0):
        if self.verbosity >= level:
            self.add(f"[{_caller_file(2)}] {text}")

    def warning(self, text: str):
        """
        Record a problem the store recovered from (failed save, unreadable
        partition, bad config). Recorded at any verbosity so a front end can
        surface it through warnings().
        """
        self.add(f"[{_caller_file(2)}] {WARNING_TAG} {text}")

    def warnings(self, since: int = 0):
        """Warning entries from index `since` onward, as (timestamp, text)."""
        return [e for e in LogManager.__log[since:] if WARNING_TAG in e[1]]

    def get(self, index: int = None):
        if index is not None:
            return LogManager.__log[index]
        return LogManager.__log.copy()

    def count(self):
        return len(LogManager.__log)

    def set_verbosity(self, verbosity: int = 0):
        self.verbosity = verbosity

    def clear(self):
        """Clear all log entries."""
        LogManager.__log.clear()
        LogManager.__log.append((_now(), "Log cleared"))

    def write_to_file(self, filepath: str):
        """Write all log entries to a file."""
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                for timestamp, message in LogManager.__log:
                    f.write(f"[{timestamp}] {message}\n")
            self.add(f"Log written to file: {filepath}")
        except OSError as e:
            self.warning(f"Failed to write log to file '{filepath}': {e}")

################################################################################################

Log = LogManager()

################################################################################################

#!/usr/bin/env python3
"""
Jarvis Voice Utilities

Logging, crash protection, and common utilities for the Jarvis service.
"""

import os
import sys
import time
import traceback
import threading
from datetime import datetime
from typing import Callable

# Global lock for stdout to prevent garbled output when the stdin reader thread logs
_stdout_lock = threading.Lock()

_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "WARNING": 30, "ERROR": 40}
_min_level = _LEVELS.get(os.getenv("JARVIS_LOG_LEVEL", "INFO").upper(), 20)


def set_log_level(level: str):
    """Change the minimum level printed by jarvis_log."""
    global _min_level
    _min_level = _LEVELS.get(str(level).upper(), _min_level)


def jarvis_log(tag: str, message: str, level: str = "INFO"):
    """
    Log a message with timestamp and tag.

    Format: [HH:MM:SS.mmm] [LEVEL] [TAG] message

    Args:
        tag: Component tag (e.g., "STATE", "MARKET", "SPEAK")
        message: Log message
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    if _LEVELS.get(level.upper(), 20) < _min_level:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

    # Format: [14:08:25.342] [INFO] [STATE] listening → processing
    log_line = f"[{timestamp}] [{level}] [{tag}] {message}"

    with _stdout_lock:
        print(log_line, flush=True)


def log_crash(exc_type, exc_value, exc_traceback):
    """
    Log crash information to file for debugging.

    Args:
        exc_type: Exception type
        exc_value: Exception value
        exc_traceback: Exception traceback
    """
    from jarvis import LOGS_DIR
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    crash_file = os.path.join(LOGS_DIR, f"jarvis_crash_{timestamp}.log")

    try:
        os.makedirs(LOGS_DIR, exist_ok=True)
        with open(crash_file, 'w', encoding='utf-8') as f:
            f.write("Jarvis Voice Crash Log\n")
            f.write(f"Timestamp: {timestamp}\n")
            f.write(f"Exception Type: {exc_type.__name__}\n")
            f.write(f"Exception Value: {exc_value}\n")
            f.write("\nTraceback:\n")
            traceback.print_exception(exc_type, exc_value, exc_traceback, file=f)
            f.write("\n\nThread Information:\n")
            for thread in threading.enumerate():
                f.write(f"  - {thread.name} (daemon={thread.daemon})\n")

        jarvis_log("CRASH", f"Crash log saved to {crash_file}", level="ERROR")
    except Exception as e:
        print(f"[CRITICAL] Failed to write crash log: {e}", file=sys.stderr)


def setup_crash_protection():
    """
    Setup global crash protection for the application.

    This should be called once at the start of the application.
    """
    def custom_excepthook(exc_type, exc_value, exc_traceback):
        log_crash(exc_type, exc_value, exc_traceback)
        # Call the original excepthook to still print to stderr
        sys.__excepthook__(exc_type, exc_value, exc_traceback)

    sys.excepthook = custom_excepthook
    jarvis_log("INIT", "Crash protection enabled")


def thread_safe_loop(thread_name: str, loop_func: Callable, stop_event, retry_delay: float = 1.0):
    """
    Run a loop function with crash protection and auto-retry.

    Args:
        thread_name: Name of the thread for logging
        loop_func: Function to run in the loop (should check stop_event)
        stop_event: threading.Event to signal stop
        retry_delay: Delay in seconds before retry after crash
    """
    jarvis_log(thread_name, "Thread started", level="DEBUG")

    while not stop_event.is_set():
        try:
            loop_func()
        except Exception as e:
            jarvis_log(thread_name, f"Thread crashed: {e}", level="ERROR")
            jarvis_log(thread_name, f"Traceback: {traceback.format_exc()}", level="DEBUG")
            jarvis_log(thread_name, f"Restarting in {retry_delay}s...")
            time.sleep(retry_delay)

    jarvis_log(thread_name, "Thread stopped", level="DEBUG")

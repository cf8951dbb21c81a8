"""Edit jshell scripts, run them through the jshell executable and watch the output."""

__version__ = "0.1.0"

"""
ANSI color codes for CLI output.
"""

COLOR_RESET = '\033[0m'
COLOR_INFO = '\033[0;36m'       # cyan
COLOR_PROMPT = '\033[0;34m'     # blue
COLOR_SELECTION = '\033[0;36m'  # cyan
COLOR_SUCCESS = '\033[0;32m'    # green
COLOR_WARNING = '\033[1;33m'    # yellow
COLOR_ERROR = '\033[0;31m'      # red
COLOR_DISABLED = '\033[2m'      # dim

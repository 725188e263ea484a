"""Constants for the Rich display system."""

# Emoji mappings for summary and diagnostic output
EMOJI_MAP = {
    "chain": "🔗",
    "session": "🍪",
    "complete": "✓",
}

# Rich markup styles for different message types
STYLES = {
    "success": "bold green",
    "error": "bold red",
    "story_title": "bold cyan",
}

# Log format
LOG_FORMAT = "%(message)s"
FILE_LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%d/%b/%Y %H:%M:%S"

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

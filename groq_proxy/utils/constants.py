"""Application constants and default values."""

# Default Groq API configuration
DEFAULTS = {
    "MODEL": "llama-3.1-8b-instant",
    "TEMPERATURE": 0.7,
    "TOP_P": 1.0,
    "PORT": 3001,
    "LOG_LEVEL": "info",
}

ERROR_MESSAGES = {
    "MESSAGES_REQUIRED": "Messages are required.",
    "JSON_PARSE_ERROR": "Failed to parse JSON body.",
    "GROQ_API_ERROR": "Failed to communicate with Groq API",
    "MODELS_ERROR": "Failed to fetch available models",
    "INTERNAL_ERROR": "Internal server error",
    "ROUTE_NOT_FOUND": "Route not found",
}

SERVICE_CONFIG = {
    "NAME": "groq-api-proxy",
    "VERSION": "1.0.0",
    "LOG_DIR": "logs",
    "LOG_MAX_BYTES": 20 * 1024 * 1024,
    "LOG_BACKUP_COUNT": 14,
}

# Request bodies are only read for these methods
WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")

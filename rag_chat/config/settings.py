"""
Application-wide configuration management.

This module loads configuration from environment variables and provides
a singleton Config object that can be accessed throughout the application.
Uses Singleton pattern to ensure consistent configuration access.
"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from rag_chat.config.constants import DEFAULT_NAMESPACE

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """
    Singleton configuration class for application settings.

    This class follows the Singleton pattern to ensure only one instance
    of configuration exists throughout the application lifecycle.
    """

    _instance: Optional['Config'] = None
    _initialized: bool = False

    def __new__(cls):
        """Singleton pattern: return the same instance if already created."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize configuration (only once due to Singleton pattern)."""
        if self._initialized:
            return

        # ====================================================================
        # API KEYS & ENDPOINTS
        # ====================================================================
        self.OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY", "")
        self.OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
        self.FIREWORKS_API_KEY = os.getenv("FIREWORKS_API_KEY", "")
        self.FIREWORKS_BASE_URL = os.getenv("FIREWORKS_BASE_URL", "https://api.fireworks.ai/inference/v1")
        self.ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY", "")
        self.ANTHROPIC_BASE_URL = os.getenv("ANTHROPIC_BASE_URL") or None
        self.OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
        self.APP_REFERER = os.getenv("APP_REFERER", "http://localhost:3000")
        self.APP_TITLE = os.getenv("APP_TITLE", "Chat App")

        # ====================================================================
        # PATHS
        # ====================================================================
        # Get the project root directory (parent of rag_chat/)
        project_root = Path(__file__).parent.parent.parent

        self.PROJECT_ROOT = project_root
        self.DATA_DIR = project_root / "data"
        self.INDICES_DIR = self.DATA_DIR / "indices"
        self.RESULTS_DIR = project_root / "results"
        self.LOGS_DIR = self.RESULTS_DIR / "logs"

        # Ensure directories exist
        self._ensure_directories()

        # ====================================================================
        # EMBEDDING SETTINGS
        # ====================================================================
        self.EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
        self.EMBEDDING_API_BASE = os.getenv("EMBEDDING_API_BASE") or None

        # ====================================================================
        # RETRIEVAL SETTINGS
        # ====================================================================
        self.TOP_K_RESULTS = int(os.getenv("TOP_K_RESULTS", "5"))
        self.VECTOR_NAMESPACE = os.getenv("VECTOR_NAMESPACE", DEFAULT_NAMESPACE)
        self.CHROMA_PERSIST_DIR = os.getenv("CHROMA_PERSIST_DIR", str(self.INDICES_DIR))

        # ====================================================================
        # PIPELINE SETTINGS
        # ====================================================================
        self.TURN_TIMEOUT_SECONDS = float(os.getenv("TURN_TIMEOUT_SECONDS", "45"))
        self.BACKUP_TIMEOUT_SECONDS = float(os.getenv("BACKUP_TIMEOUT_SECONDS", "15"))
        self.INTENT_HISTORY_MESSAGES = int(os.getenv("INTENT_HISTORY_MESSAGES", "6"))
        self.HYDE_HISTORY_MESSAGES = int(os.getenv("HYDE_HISTORY_MESSAGES", "3"))

        # ====================================================================
        # ASSISTANT IDENTITY
        # ====================================================================
        self.AI_NAME = os.getenv("AI_NAME", "Atlas")
        self.OWNER_NAME = os.getenv("OWNER_NAME", "the Atlas team")
        self.OWNER_DESCRIPTION = os.getenv(
            "OWNER_DESCRIPTION",
            "The Atlas team builds tools that make knowledge easy to explore.",
        )
        self.AI_ROLE = os.getenv(
            "AI_ROLE",
            "Your job is to answer questions clearly, with sources when you have them.",
        )
        self.AI_TONE = os.getenv("AI_TONE", "friendly, concise and professional")

        # ====================================================================
        # LOGGING SETTINGS
        # ====================================================================
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_CONSOLE_LEVEL = os.getenv("LOG_CONSOLE_LEVEL", "")
        self.LOG_FILE = self.LOGS_DIR / "app.log"
        self.LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
        self.LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

        # Mark as initialized
        self._initialized = True

    def _ensure_directories(self):
        """Create necessary directories if they don't exist."""
        directories = [
            self.DATA_DIR,
            self.INDICES_DIR,
            self.RESULTS_DIR,
            self.LOGS_DIR,
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def validate(self) -> bool:
        """
        Validate that required configuration is present.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        valid = True
        if not self.OPENROUTER_API_KEY:
            print("WARNING: OPENROUTER_API_KEY not set in environment variables")
            valid = False
        if not self.OPENAI_API_KEY:
            print("WARNING: OPENAI_API_KEY not set in environment variables (needed for embeddings)")
            valid = False
        return valid


# Global singleton instance
config = Config()

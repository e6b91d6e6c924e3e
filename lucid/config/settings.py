"""
Configuration settings management
Centralized configuration using environment variables
"""
import os
from pathlib import Path
from functools import lru_cache
from dotenv import load_dotenv


KNOWLEDGE_BACKENDS = ("local", "notion")


class Settings:
    """Application settings loaded from environment variables"""

    # Local storage configuration
    data_dir: Path
    state_namespace: str = "modern-blog-store"
    log_level: str = "INFO"

    # Knowledge backend: "local" JSON storage or a Notion database
    knowledge_backend: str = "local"

    # Notion configuration (only required for the notion backend)
    notion_token: str = ""
    notion_database_id: str = ""
    # Notion property name mappings (optional, for custom property names)
    # Example: NOTION_PROPERTY_TITLE=Name means use "Name" as the title property in Notion
    notion_property_title: str = "Title"
    notion_property_content: str = "Content"
    notion_property_type: str = "Type"
    notion_property_tags: str = "Tags"
    notion_property_difficulty: str = "Difficulty"
    notion_property_mastery: str = "Mastery"
    notion_property_parent: str = "Parent"

    def __init__(self):
        """Load settings from environment variables"""
        # Load .env file from project root
        env_path = Path(__file__).parent.parent.parent / '.env'
        if env_path.exists():
            load_dotenv(env_path)
        else:
            load_dotenv()

        # Local settings
        self.data_dir = Path(os.getenv('LUCID_DATA_DIR', '~/.lucid')).expanduser()
        self.state_namespace = os.getenv('LUCID_STATE_NAMESPACE', 'modern-blog-store')
        self.log_level = os.getenv('LUCID_LOG_LEVEL', 'INFO').upper()
        self.knowledge_backend = os.getenv('LUCID_KNOWLEDGE_BACKEND', 'local').strip().lower()

        # Notion settings
        self.notion_token = os.getenv('NOTION_TOKEN', '')
        self.notion_database_id = os.getenv('NOTION_DATABASE_ID', '')
        self.notion_property_title = os.getenv('NOTION_PROPERTY_TITLE', 'Title')
        self.notion_property_content = os.getenv('NOTION_PROPERTY_CONTENT', 'Content')
        self.notion_property_type = os.getenv('NOTION_PROPERTY_TYPE', 'Type')
        self.notion_property_tags = os.getenv('NOTION_PROPERTY_TAGS', 'Tags')
        self.notion_property_difficulty = os.getenv('NOTION_PROPERTY_DIFFICULTY', 'Difficulty')
        self.notion_property_mastery = os.getenv('NOTION_PROPERTY_MASTERY', 'Mastery')
        self.notion_property_parent = os.getenv('NOTION_PROPERTY_PARENT', 'Parent')

        # Validate required settings
        self._validate()

    @property
    def storage_dir(self) -> Path:
        return self.data_dir / "storage"

    @property
    def upload_dir(self) -> Path:
        return self.data_dir / "uploads"

    @property
    def export_dir(self) -> Path:
        return self.data_dir / "exports"

    @property
    def state_dir(self) -> Path:
        return self.data_dir / "state"

    def _validate(self):
        """Validate required settings"""
        if self.knowledge_backend not in KNOWLEDGE_BACKENDS:
            raise ValueError(
                f"Unknown LUCID_KNOWLEDGE_BACKEND '{self.knowledge_backend}', "
                f"expected one of: {', '.join(KNOWLEDGE_BACKENDS)}"
            )

        if self.knowledge_backend != "notion":
            return

        required = {
            'NOTION_TOKEN': self.notion_token,
            'NOTION_DATABASE_ID': self.notion_database_id,
        }

        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                f"Please set them in .env file or environment variables"
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

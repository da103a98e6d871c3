# core/config.py

from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Loads application settings from .env file."""
    mongo_uri: Optional[str] = None
    mongo_user: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    db_name: str = "pepper_advisor_db"

    # A missing key is a valid state: the advisor answers with the
    # "unavailable" message instead of calling the chat model.
    openai_api_key: Optional[str] = None
    chat_model: str = "gpt-3.5-turbo"

    # Embeddings: "openai" or "huggingface"
    embedding_provider: str = "openai"
    embedding_model: str = "text-embedding-3-small"
    embedding_api_key: Optional[str] = None
    huggingfacehub_api_token: Optional[str] = None

    @property
    def final_mongo_uri(self) -> str:
        """Constructs safe MongoDB URI from components (preferred) or returns the provided one."""
        if self.mongo_user and self.mongo_password:
            import urllib.parse
            user = urllib.parse.quote_plus(self.mongo_user)
            password = urllib.parse.quote_plus(self.mongo_password)
            return f"mongodb+srv://{user}:{password}@{self.mongo_host}/"

        if self.mongo_uri:
            return self.mongo_uri

        return f"mongodb://{self.mongo_host}:{self.mongo_port}/"

    @property
    def final_embedding_api_key(self) -> Optional[str]:
        """Dedicated embedding key if set, otherwise the chat key."""
        return self.embedding_api_key or self.openai_api_key

    class Config:
        env_file = ".env"

# Create a single, reusable instance of the settings
settings = Settings()

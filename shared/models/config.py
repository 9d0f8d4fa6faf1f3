from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Represents a single configuration parameter required for a env setting.

    Attributes:
        env_key (str): The key/name of the environment variable to read.
        val_type (str): The expected type of the environment variable's value. Supported types are "string" and "number".
        default (str | int | float | None): An optional default value if the environment variable is not set. If None, the variable is required and an error will be raised if it is not set.
    """

    env_key: str
    val_type: str
    default: str | int | float | None = None


class ModelServiceConfig(BaseModel):
    """
    Connection and model settings for the embedding/summarization service.

    Passed explicitly into the model client constructor. Every field has a
    working default for a local Ollama installation.

    Attributes:
        base_url (str): Address of the model service.
        api_key (str): Optional bearer token, empty for an unsecured local service.
        embed_model (str): Model used for embedding requests.
        summary_model (str): Model used for summary generation.
        timeout (float): Per-request timeout in seconds.
        embed_workers (int): Worker pool size for embedding batches. <= 0 means one per CPU.
        summary_workers (int): Worker pool size for summary batches. <= 0 means one per CPU.
    """

    base_url: str = "http://localhost:11434"
    api_key: str = ""
    embed_model: str = "nomic-embed-text"
    summary_model: str = "qwen3:0.6b"
    timeout: float = 60.0
    embed_workers: int = 0
    summary_workers: int = 0

    def get_required_models(self) -> list[str]:
        """Return the distinct models that must be installed on the service."""
        return list(dict.fromkeys([self.embed_model, self.summary_model]))

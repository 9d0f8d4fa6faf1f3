from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.errors import ModelServiceResponseError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig, ModelServiceConfig


class LLMClientOllama(LLMClientInterface):
    def __init__(self, helper_config: HelperConfig, model_config: ModelServiceConfig | None = None):
        super().__init__(helper_config=helper_config, model_config=model_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ollama"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        defaults = ModelServiceConfig()
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=defaults.base_url),
            EnvConfig(env_key="API_KEY", val_type="string", default=defaults.api_key),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self.model_config.api_key:
            return {"Authorization": f"Bearer {self.model_config.api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_endpoint_healthcheck(self) -> str:
        # root answers "Ollama is running"
        return ""

    def _get_endpoint_models(self) -> str:
        return "/api/tags"

    def _get_endpoint_embedding(self) -> str:
        return "/api/embeddings"

    def _get_endpoint_generate(self) -> str:
        return "/api/generate"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the Ollama embedding request body.

        Returns:
            dict: {"model": "...", "prompt": "..."}
        """
        return {"model": self.model_config.embed_model, "prompt": text}

    def get_generate_payload(self, prompt: str) -> dict:
        """Build the Ollama non-streaming generation request body.

        Returns:
            dict: {"model": "...", "prompt": "...", "stream": False}
        """
        return {"model": self.model_config.summary_model, "prompt": prompt, "stream": False}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list[float]:
        """Extract the vector from an Ollama /api/embeddings response ({"embedding": [...]})."""
        embedding = response_data.get("embedding") if isinstance(response_data, dict) else None
        if not isinstance(embedding, list) or not embedding:
            keys = list(response_data.keys()) if isinstance(response_data, dict) else type(response_data).__name__
            raise ModelServiceResponseError(
                "Ollama response does not contain a valid embedding. Response keys: %s" % keys
            )
        try:
            return [float(value) for value in embedding]
        except (TypeError, ValueError) as exc:
            raise ModelServiceResponseError(f"Ollama embedding contains non-numeric values: {exc}") from exc

    def extract_generate_response(self, response_data: dict) -> str:
        """Extract the generated text from an Ollama /api/generate response ({"response": "...", "done": true})."""
        content = response_data.get("response") if isinstance(response_data, dict) else None
        if not isinstance(content, str):
            keys = list(response_data.keys()) if isinstance(response_data, dict) else type(response_data).__name__
            raise ModelServiceResponseError(
                "Ollama generate response does not contain generated text. Response keys: %s" % keys
            )
        return content

    def extract_model_names(self, response_data: dict) -> list[str]:
        """Extract model names from an Ollama /api/tags response ({"models": [{"name": ...}]})."""
        models = response_data.get("models") if isinstance(response_data, dict) else None
        if not isinstance(models, list):
            raise ModelServiceResponseError("Ollama model listing does not contain a 'models' list.")
        return [model["name"] for model in models if isinstance(model, dict) and model.get("name")]

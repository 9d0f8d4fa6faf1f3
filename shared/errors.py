"""Exception hierarchy shared by the model client, similarity engine and store."""


class BluffyError(Exception):
    """Base class for all errors raised by bluffy components."""


##########################################
############## MODEL SERVICE #############
##########################################

class ModelServiceError(BluffyError):
    """Base class for failures talking to the model service."""


class ModelServiceUnavailableError(ModelServiceError):
    """The model service cannot be reached or answers with a non-success status."""

    def __init__(self, base_url: str, reason: str) -> None:
        self.base_url = base_url
        self.reason = reason
        super().__init__(
            f"Failed to connect to the model service at {base_url}: {reason}\n\n"
            "Please ensure:\n"
            "1. Ollama is installed (visit https://ollama.ai)\n"
            "2. Ollama is running (try 'ollama serve')\n"
            "3. The correct host is specified (default: http://localhost:11434)"
        )


class MissingModelsError(ModelServiceError):
    """One or more required models are not installed on the model service."""

    def __init__(self, missing_models: list[str]) -> None:
        self.missing_models = missing_models
        commands = "\n".join(f"ollama pull {model}" for model in missing_models)
        super().__init__(
            f"Missing required models: {', '.join(missing_models)}\n\n"
            f"Please install them with:\n{commands}"
        )


class ModelServiceConnectionError(ModelServiceError):
    """A single request failed at the transport level."""


class ModelServiceStatusError(ModelServiceError):
    """A single request returned a non-success HTTP status."""

    def __init__(self, url: str, status_code: int, body: str) -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"Model service returned status {status_code} for {url}: {body}")


class ModelServiceResponseError(ModelServiceError):
    """A single response could not be decoded into the expected shape."""


##########################################
################ BATCHES #################
##########################################

class BatchProcessingError(BluffyError):
    """Aggregate of every failed job in one concurrent batch.

    Attributes:
        operation (str): Name of the batch operation (e.g. "embedding").
        failures (dict[int, Exception]): Underlying cause per failing chunk position.
    """

    def __init__(self, operation: str, failures: dict[int, Exception]) -> None:
        self.operation = operation
        self.failures = dict(sorted(failures.items()))
        details = "; ".join(f"chunk {index}: {error}" for index, error in self.failures.items())
        super().__init__(f"{operation} errors occurred ({len(self.failures)} failed): {details}")

    @property
    def failed_indices(self) -> list[int]:
        return list(self.failures.keys())


##########################################
############### SIMILARITY ###############
##########################################

class DimensionMismatchError(BluffyError, ValueError):
    """Two vectors with different lengths were compared."""

    def __init__(self, len_a: int, len_b: int, context: str | None = None) -> None:
        self.len_a = len_a
        self.len_b = len_b
        message = f"vectors must have the same length: {len_a} vs {len_b}"
        if context:
            message = f"{context}: {message}"
        super().__init__(message)


##########################################
################# STORE ##################
##########################################

class StoreError(BluffyError):
    """A persistence operation failed. The original exception is chained as __cause__."""


##########################################
################# INPUT ##################
##########################################

class InputDocumentError(BluffyError):
    """The input document cannot be read or is not valid UTF-8 text."""

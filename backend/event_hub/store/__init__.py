# Importing the store registers its triggers with the model mappers
from event_hub.store import triggers  # noqa: F401

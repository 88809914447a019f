"""In-memory key-value storage adapter."""


class MemoryKeyValueStore:
    """
    Dict-backed key-value storage.

    Implements KeyValueStore protocol. Nothing survives the process.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    async def load(self, key: str) -> str | None:
        return self.data.get(key)

    async def store(self, key: str, value: str) -> None:
        self.data[key] = value

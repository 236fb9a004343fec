from typing import Any, Iterable, Optional


class SinkError(Exception):
    """
    Base exception for all sink errors
    """
    pass


class ConfigError(SinkError):
    """
    Raised when sink configuration is invalid.
    Always surfaced before any record flows.
    """
    pass


class SchemaParseError(ConfigError):
    """
    Raised when schema text is malformed or not a well-formed record
    """
    pass


class UnsupportedTypeError(ConfigError):
    """
    Raised when a schema type has no DDL / storage equivalent
    """

    def __init__(self, field_name: str, type_name: str, target: str = "Hive DDL"):
        self.field_name = field_name
        self.type_name = type_name
        super().__init__(
            f"Field '{field_name}' has type '{type_name}' "
            f"which has no {target} equivalent"
        )


class InvalidCodecError(ConfigError):
    """
    Raised when a compression codec name is not recognized
    """

    def __init__(self, codec: str, allowed: Iterable[str]):
        self.codec = codec
        self.allowed = sorted(allowed)
        super().__init__(
            f"Invalid compression codec '{codec}'. "
            f"Allowed values: {', '.join(self.allowed)}"
        )


class MacroResolutionError(ConfigError):
    """
    Raised when a ${macro} placeholder has no value in the runtime arguments
    """

    def __init__(self, macro: str, field_name: str):
        self.macro = macro
        self.field_name = field_name
        super().__init__(
            f"Macro '${{{macro}}}' used by '{field_name}' "
            f"has no value in the runtime arguments"
        )


class TransformError(SinkError):
    """
    Raised when a record does not conform to the sink schema.
    Aborts the enclosing task; never retried here.
    """

    MAX_CONTEXT_LENGTH = 200

    def __init__(self, field: str, message: str, record: Optional[Any] = None):
        self.field = field
        self.reason = message
        self.record = record
        text = f"Field '{field}': {message}"
        if record is not None:
            text += f" (record: {self._summarize(record)})"
        super().__init__(text)

    @classmethod
    def _summarize(cls, record: Any) -> str:
        text = repr(record)
        if len(text) > cls.MAX_CONTEXT_LENGTH:
            text = text[: cls.MAX_CONTEXT_LENGTH - 3] + "..."
        return text


class SinkStateError(SinkError):
    """
    Raised when a sink operation is called out of lifecycle order
    """
    pass

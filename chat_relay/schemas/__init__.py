from chat_relay.schemas.diagnostics import DiagnosticsRequest
from chat_relay.schemas.relay import RelayRequest

__all__ = ["RelayRequest", "DiagnosticsRequest"]

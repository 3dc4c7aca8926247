from chat_relay.services.diagnostics_service import diagnose
from chat_relay.services.dispatch_service import (
    DispatchOutcome,
    DispatchStatus,
    classify_response,
    dispatch_message,
)
from chat_relay.services.eligibility_service import Eligibility, check_eligibility
from chat_relay.services.history_service import (
    append_message,
    save_assistant_message,
    save_human_message,
)
from chat_relay.services.relay_service import RequestParseError, relay_message

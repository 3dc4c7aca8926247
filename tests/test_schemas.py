import pytest
from pydantic import ValidationError

from chat_relay.schemas.relay import RelayRequest


class TestRelayRequest:
    @pytest.mark.parametrize("raw, expected", [(123, "123"), (1.5, "1.5"), (True, "true"), ("abc", "abc")])
    def test_scalars_read_as_text(self, raw, expected):
        assert RelayRequest(session_id=raw, message="hi").session_id == expected

    @pytest.mark.parametrize("raw", [0, 0.0, False, "", None])
    def test_falsy_values_are_missing(self, raw):
        request = RelayRequest(session_id="abc", message=raw)

        assert request.field_presence() == {"session_id": True, "message": False}
        assert request.is_complete is False

    def test_objects_are_rejected(self):
        with pytest.raises(ValidationError):
            RelayRequest(session_id={"id": 1}, message="hi")

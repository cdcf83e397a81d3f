"""AT commands dealing with the SIM: PIN state, SMS sending, phonebook writes."""

from __future__ import annotations

from enum import IntEnum

from .commands import MODEM_COMMAND_TIMEOUT, ModemCommand, StreamWriteCommand, ULongCommand
from .types import MAX_PHONE_LENGTH

WRITE_PHONEBOOK_CMD = "+CPBW"
SMS_SEND_TIMEOUT = 5.0


class PinState(IntEnum):
    UNKNOWN = 0
    READY = 1
    SIM_PIN = 2
    SIM_PUK = 3
    SIM_PIN2 = 4
    SIM_PUK2 = 5
    PH_NET_PIN = 6
    PH_NETSUB_PIN = 7
    PH_SP_PIN = 8
    PH_CORP_PIN = 9
    PH_SIM_PIN = 10


_PIN_MESSAGES = {
    "READY": PinState.READY,
    "SIM PIN": PinState.SIM_PIN,
    "SIM PUK": PinState.SIM_PUK,
    "SIM PIN2": PinState.SIM_PIN2,
    "SIM PUK2": PinState.SIM_PUK2,
    "PH-NET PIN": PinState.PH_NET_PIN,
    "PH-NETSUB PIN": PinState.PH_NETSUB_PIN,
    "PH-SP PIN": PinState.PH_SP_PIN,
    "PH-CORP PIN": PinState.PH_CORP_PIN,
    "PH-SIM PIN": PinState.PH_SIM_PIN,
}


class PinStatusCommand(ModemCommand):
    """Queries the SIM PIN state."""

    def __init__(self, cmd: str | None, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(cmd, timeout, is_check=True)
        self.pin_state = PinState.UNKNOWN

    def handle_data_content(self, response: str) -> PinState:
        """Read the state from a ``+CPIN: <state>`` line and return it."""
        skip = self.cmd_len + 2
        if len(response) > skip:
            state = _PIN_MESSAGES.get(response[skip:])
            if state is not None:
                self.pin_state = state
        return self.pin_state


class SMSSendCommand(StreamWriteCommand):
    """Starts an SMS to a number; the text follows the prompt."""

    def __init__(
        self, phone_number: str, cmd: str | None, sms_id: int, timeout: float = SMS_SEND_TIMEOUT
    ) -> None:
        super().__init__(cmd, timeout)
        if len(phone_number) >= MAX_PHONE_LENGTH:
            raise ValueError(
                f"phone number longer than {MAX_PHONE_LENGTH - 1} characters: {phone_number!r}"
            )
        if not 0 <= sms_id <= 0xFFFF:
            raise ValueError(f"sms_id {sms_id} outside 0..65535")
        self.phone_number = phone_number
        self.sms_id = sms_id

    def params(self) -> str:
        return f'"{self.phone_number}"'

    def extra_trigger(self) -> str | None:
        return "> "


class SimEntryField(IntEnum):
    NUMBER = 0
    TEXT = 1
    GROUP = 2
    AD_NUMBER = 3
    AD_TYPE = 4
    SECOND_TEXT = 5
    EMAIL = 6


class SimWriteEntryCommand(ULongCommand):
    """Writes a phonebook entry at the given index."""

    def __init__(self, value_data: int, timeout: float = MODEM_COMMAND_TIMEOUT) -> None:
        super().__init__(value_data, WRITE_PHONEBOOK_CMD, timeout)
        self.is_hidden = False
        self._content: list[str | None] = [None] * len(SimEntryField)
        self._amount = 0

    def set_content(
        self,
        number: str | None,
        text: str | None,
        group: str | None = None,
        ad_number: str | None = None,
        ad_type: str | None = None,
        second_text: str | None = None,
        email: str | None = None,
        is_hidden: bool = False,
    ) -> None:
        """Replace every field at once; the written field count never shrinks."""
        self.is_hidden = is_hidden
        self._content = [number, text, group, ad_number, ad_type, second_text, email]
        present = [index for index, item in enumerate(self._content) if item is not None]
        if present:
            self._amount = max(self._amount, present[-1] + 1)

    def set_field(self, data: str | None, field: SimEntryField) -> None:
        field = SimEntryField(field)
        self._amount = max(self._amount, field + 1)
        self._content[field] = data

    def get_field(self, field: SimEntryField) -> str | None:
        return self._content[SimEntryField(field)]

    def is_empty(self) -> bool:
        return self._amount == 0

    def params(self) -> str:
        parts = [super().params()]
        for index, item in enumerate(self._content[: self._amount]):
            parts.append(f',"{item or ""}"')
            if index == SimEntryField.NUMBER:
                # The number type field is left empty.
                parts.append(",")
        return "".join(parts)
"""RFXCOM protocol bindings: packet types, sub-types and control frames."""

from __future__ import annotations

from enum import IntEnum
from typing import Final

from construct import Int8ub, Struct as BinStruct  # type: ignore

MAX_PACKET_LENGTH: Final[int] = 255
MIN_MESSAGE_LENGTH: Final[int] = 3
INTERFACE_CONTROL_LENGTH: Final[int] = 13
TRANSMITTER_MESSAGE_LENGTH: Final[int] = 4
UINT8_MASK: Final[int] = 255

# Every message starts with: length, packet type, sub type, sequence number.
HEADER_STRUCT: Final = BinStruct(
    "length" / Int8ub,
    "packet_type" / Int8ub,
    "sub_type" / Int8ub,
    "seq_nbr" / Int8ub,
)
HEADER_SIZE: Final[int] = HEADER_STRUCT.sizeof()  # type: ignore


class PacketType(IntEnum):
    INTERFACE_CONTROL = 0x00
    INTERFACE_MESSAGE = 0x01
    TRANSMITTER_MESSAGE = 0x02
    UNDECODED_RF_MESSAGE = 0x03
    LIGHTING1 = 0x10
    LIGHTING2 = 0x11
    LIGHTING3 = 0x12
    LIGHTING4 = 0x13
    LIGHTING5 = 0x14
    LIGHTING6 = 0x15
    CHIME = 0x16
    FAN = 0x17
    CURTAIN1 = 0x18
    BLINDS1 = 0x19
    RFY = 0x1A
    HOME_CONFORT = 0x1B
    SECURITY1 = 0x20
    SECURITY2 = 0x21
    CAMERA1 = 0x28
    REMOTE_CONTROL = 0x30
    THERMOSTAT1 = 0x40
    THERMOSTAT2 = 0x41
    THERMOSTAT3 = 0x42
    BBQ = 0x4E
    TEMPERATURE_RAIN = 0x4F
    TEMPERATURE = 0x50
    HUMIDITY = 0x51
    TEMPERATURE_HUMIDITY = 0x52
    BAROMETRIC = 0x53
    TEMPERATURE_HUMIDITY_BAROMETRIC = 0x54
    RAIN = 0x55
    WIND = 0x56
    UV = 0x57
    DATE_TIME = 0x58
    CURRENT = 0x59
    ENERGY = 0x5A
    CURRENT_ENERGY = 0x5B
    POWER = 0x5C
    WEIGHT = 0x5D
    GAS = 0x5E
    WATER = 0x5F
    RFXSENSOR = 0x70
    RFXMETER = 0x71
    FS20 = 0x72


# Device packet types the codec hands to listeners. Anything else outside the
# control plane is reported as not implemented.
DEVICE_PACKET_TYPES: Final[frozenset[PacketType]] = frozenset(
    {
        PacketType.UNDECODED_RF_MESSAGE,
        PacketType.LIGHTING1,
        PacketType.LIGHTING2,
        PacketType.LIGHTING4,
        PacketType.LIGHTING5,
        PacketType.LIGHTING6,
        PacketType.CHIME,
        PacketType.FAN,
        PacketType.CURTAIN1,
        PacketType.BLINDS1,
        PacketType.RFY,
        PacketType.HOME_CONFORT,
        PacketType.SECURITY1,
        PacketType.THERMOSTAT1,
        PacketType.THERMOSTAT3,
        PacketType.BBQ,
        PacketType.TEMPERATURE_RAIN,
        PacketType.TEMPERATURE,
        PacketType.HUMIDITY,
        PacketType.TEMPERATURE_HUMIDITY,
        PacketType.BAROMETRIC,
        PacketType.TEMPERATURE_HUMIDITY_BAROMETRIC,
        PacketType.RAIN,
        PacketType.WIND,
        PacketType.UV,
        PacketType.DATE_TIME,
        PacketType.CURRENT,
        PacketType.ENERGY,
        PacketType.CURRENT_ENERGY,
        PacketType.POWER,
        PacketType.WEIGHT,
        PacketType.RFXMETER,
    }
)


class InterfaceControlSubType(IntEnum):
    MODE_COMMAND = 0x00


class InterfaceSubType(IntEnum):
    RESPONSE = 0x00
    UNKNOWN_RTS_REMOTE = 0x01
    NO_EXTENDED_HW_PRESENT = 0x02
    LIST_RFY_REMOTES = 0x03
    LIST_ASA_REMOTES = 0x04
    START_RECEIVER = 0x07
    TRANSMITTER_RESPONSE = 0xFE
    UNKNOWN_COMMAND = 0xFF


class InterfaceCommand(IntEnum):
    RESET = 0x00
    GET_STATUS = 0x02
    SET_MODE = 0x03
    ENABLE_ALL = 0x04
    ENABLE_UNDECODED_PACKETS = 0x05
    SAVE_RECEIVING_MODES = 0x06
    START_RECEIVER = 0x07
    T1 = 0x08
    T2 = 0x09


class TransceiverType(IntEnum):
    RFXTRX310_MHZ = 0x50
    RFXTRX315_MHZ = 0x51
    RFXREC433_92_MHZ = 0x52
    RFXTRX433_92_MHZ = 0x53
    RFXTRX868_00_MHZ = 0x55
    RFXTRX868_00_MHZ_FSK = 0x56
    RFXTRX868_30_MHZ = 0x57
    RFXTRX868_30_MHZ_FSK = 0x58
    RFXTRX868_35_MHZ = 0x59
    RFXTRX868_35_MHZ_FSK = 0x5A
    RFXTRX868_95_MHZ_FSK = 0x5B


class TransmitterSubType(IntEnum):
    ERROR_RECEIVER_DID_NOT_LOCK = 0x00
    RESPONSE = 0x01


class TransmitterResponse(IntEnum):
    ACK = 0x00
    ACK_DELAYED = 0x01
    NAK = 0x02
    NAK_INVALID_AC_ADDRESS = 0x03


ACK_RESPONSES: Final[frozenset[TransmitterResponse]] = frozenset(
    {TransmitterResponse.ACK, TransmitterResponse.ACK_DELAYED}
)


def _control_frame(command: InterfaceCommand, seq_nbr: int) -> bytes:
    return bytes(
        [
            INTERFACE_CONTROL_LENGTH,
            PacketType.INTERFACE_CONTROL,
            InterfaceControlSubType.MODE_COMMAND,
            seq_nbr,
            command,
        ]
    ) + bytes(INTERFACE_CONTROL_LENGTH - 4)


CMD_RESET: Final[bytes] = _control_frame(InterfaceCommand.RESET, 0x00)
CMD_GET_STATUS: Final[bytes] = _control_frame(InterfaceCommand.GET_STATUS, 0x01)
CMD_START_RECEIVER: Final[bytes] = _control_frame(InterfaceCommand.START_RECEIVER, 0x03)

"""Bridge controller for RFXCOM 433 MHz transceivers."""

__version__ = "1.0.0"

from .bridge import RFXComBridge, SendResult  # noqa: E402
from .config.settings import BridgeConfig, ProtocolFlags, load_bridge_config  # noqa: E402
from .state import BridgeStats, BridgeStatus, StatusDetail, TransceiverInfo  # noqa: E402

__all__ = [
    "BridgeConfig",
    "BridgeStats",
    "BridgeStatus",
    "ProtocolFlags",
    "RFXComBridge",
    "SendResult",
    "StatusDetail",
    "TransceiverInfo",
    "__version__",
    "load_bridge_config",
]

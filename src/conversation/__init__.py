from src.conversation.dialogue_engine import DialogueEngine
from src.conversation.nlu import (
    classify_intent,
    extract_order_id,
    extract_refund_id,
    normalize_carrier_status,
)
from src.conversation.session_store import SessionStore
from src.conversation.slot_manager import CollectStatus, SlotManager

__all__ = [
    "DialogueEngine",
    "SessionStore",
    "SlotManager",
    "CollectStatus",
    "classify_intent",
    "extract_order_id",
    "extract_refund_id",
    "normalize_carrier_status",
]

import logging

from .schemas import RegistrationIn, Slot, SlotsFull
from .sheets import SLOT_CAPACITY

logger = logging.getLogger(__name__)

SLOT_COLUMN = 5
NOT_AFFILIATED_ID = "N/A"


class RegistrationRejected(Exception):
    """Submission refused; maps to a 400 with ``message`` as the error."""

    def __init__(self, message: str, slots_full: SlotsFull | None = None):
        super().__init__(message)
        self.message = message
        self.slots_full = slots_full


def _clean(value) -> str:
    return (value or "").strip()


def validate_registration(payload: RegistrationIn) -> Slot:
    required = [payload.name, payload.email, payload.contact, payload.slot]
    if bool(payload.is_affiliated):
        required.append(payload.affiliation_id)
    if not all(_clean(v) for v in required):
        raise RegistrationRejected("Missing required fields")
    try:
        return Slot(_clean(payload.slot))
    except ValueError:
        raise RegistrationRejected("Invalid slot") from None


def count_slots(rows) -> dict[Slot, int]:
    counts = {slot: 0 for slot in Slot}
    for row in rows:
        if len(row) <= SLOT_COLUMN:
            continue
        for slot in Slot:
            if row[SLOT_COLUMN] == slot.value:
                counts[slot] += 1
    return counts


def slots_full_from_counts(counts: dict[Slot, int], capacity: int = SLOT_CAPACITY) -> SlotsFull:
    return SlotsFull(**{slot.key: counts[slot] >= capacity for slot in Slot})


def to_row(payload: RegistrationIn, slot: Slot) -> list[str]:
    affiliated = bool(payload.is_affiliated)
    return [
        _clean(payload.name),
        _clean(payload.email),
        _clean(payload.contact),
        "Yes" if affiliated else "No",
        _clean(payload.affiliation_id) if affiliated else NOT_AFFILIATED_ID,
        slot.value,
    ]


def availability(store, capacity: int = SLOT_CAPACITY) -> tuple[dict[Slot, int], SlotsFull]:
    counts = count_slots(store.get_rows())
    return counts, slots_full_from_counts(counts, capacity)


def register(payload: RegistrationIn, store, capacity: int = SLOT_CAPACITY) -> SlotsFull:
    """Check capacity for the requested slot and append one row.

    Returns the occupancy flags as they were before the append. The read and
    the append are two separate calls against the sheet with nothing held in
    between: two submissions racing for the last seat can both pass the check.
    """
    slot = validate_registration(payload)

    counts, slots_full = availability(store, capacity)
    if getattr(slots_full, slot.key):
        logger.warning("Rejected registration for full slot %s (%d rows)", slot.value, counts[slot])
        raise RegistrationRejected("Selected slot is full", slots_full=slots_full)

    store.append_row(to_row(payload, slot))
    logger.info("Registered for slot %s (%d before append)", slot.value, counts[slot])
    return slots_full

"""Guest classification for the singles-placement heuristic."""

from __future__ import annotations

from seating.models import Channel, Guest, GuestType


def classify(guest: Guest, channel: Channel = Channel.REAL) -> GuestType:
    """Relational type of a guest: the stored type, or one inferred from attendance.

    Examples:
        2 adults, 1 child -> FAMILY
        1 adult           -> SINGLE
        2 adults          -> COUPLE
        4 adults          -> GROUP
    """
    if guest.guest_type is not None:
        return guest.guest_type

    if guest.children_attending > 0:
        return GuestType.FAMILY

    adults = guest.adults_attending
    if adults == 0:
        # Undecided guests count by their expected party
        adults = guest.seats_required(channel) or guest.invited_count

    if adults <= 1:
        return GuestType.SINGLE
    if adults == 2:
        return GuestType.COUPLE
    return GuestType.GROUP

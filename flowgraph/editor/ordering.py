"""Display-order helpers. These never touch the graph itself."""


def move_before(ordered_ids: list[str], dragged_id: str, target_id: str) -> list[str]:
    """Return a new order with dragged_id placed just before target_id.

    The target's position is taken after dragged_id has been removed, so
    dragging an item downwards lands it above the target, not below.
    """
    if not dragged_id or dragged_id == target_id:
        return list(ordered_ids)
    remaining = [state_id for state_id in ordered_ids if state_id != dragged_id]
    idx = remaining.index(target_id)
    remaining.insert(idx, dragged_id)
    return remaining


def is_permutation(ordered_ids: list[str], state_ids) -> bool:
    """True when ordered_ids holds every state id exactly once."""
    return len(ordered_ids) == len(set(ordered_ids)) and set(ordered_ids) == set(state_ids)

"""
Helpers for entities positioned by a numeric "order" field.

Items are grouped by a sibling key (e.g. parent_id for categories, a single
group for banners); order values are only meaningful within a group.
"""
import logging

logger = logging.getLogger(__name__)

MISSING_ORDER = 999


def _group_of(item, group_field):
    if not group_field:
        return None
    return item.get(group_field) or None


def _order_key(item):
    order = item.get('order')
    return MISSING_ORDER if order is None else order


def siblings_of(items, group_value, group_field):
    """Items sharing group_value, sorted by their current order"""
    group = [item for item in items if _group_of(item, group_field) == group_value]
    return sorted(group, key=_order_key)


def ensure_order(items, group_field=None):
    """
    Fill in missing order values.

    Within each group, items keep their relative order (items without an
    order sort last) and those lacking one receive their position index.
    Returns a new list grouped by sibling key.
    """
    groups = {}
    for item in items:
        groups.setdefault(_group_of(item, group_field), []).append(item)

    result = []
    for group_value in groups:
        for idx, item in enumerate(siblings_of(items, group_value, group_field)):
            order = item.get('order')
            result.append({**item, 'order': idx if order is None else order})
    return result


def next_order(items, group_value, group_field=None) -> int:
    """Order value for an item appended to a group"""
    siblings = [item for item in items if _group_of(item, group_field) == group_value]
    if not siblings:
        return 0
    return max(item.get('order') or 0 for item in siblings) + 1


def move_item(items, item_id, step: int, group_field=None):
    """
    Move an item one position within its sibling group.

    The group is renumbered 0..n-1 and the item swapped with its neighbour.
    Returns the new full list, or None when the item is missing or already
    at the edge of its group.
    """
    current = next((item for item in items if item.get('id') == item_id), None)
    if current is None:
        logger.debug(f"Cannot move {item_id}: not found")
        return None

    group_value = _group_of(current, group_field)
    siblings = siblings_of(items, group_value, group_field)
    index = next(i for i, item in enumerate(siblings) if item.get('id') == item_id)
    target = index + step
    if target < 0 or target >= len(siblings):
        return None

    ids = [item.get('id') for item in siblings]
    ids[index], ids[target] = ids[target], ids[index]
    return apply_order(items, ids)


def apply_order(items, ordered_ids):
    """Rewrite order values so ordered_ids become 0..n-1; other items untouched"""
    positions = {item_id: idx for idx, item_id in enumerate(ordered_ids)}
    return [
        {**item, 'order': positions[item.get('id')]} if item.get('id') in positions else item
        for item in items
    ]


# Direction -> step within a sibling group (left/right are used for subcategories)
REORDER_STEPS = {
    'up': -1,
    'left': -1,
    'down': 1,
    'right': 1,
}

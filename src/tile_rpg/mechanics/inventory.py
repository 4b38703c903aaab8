"""Inventory stack mutations shared by combat item use, battle drops and shops.

Stacks are ``ItemStack`` models held in a plain list owned by the party member.
Every mutation edits that list in place and never leaves a zero-quantity stack.
"""
from __future__ import annotations

from tile_rpg.models.item import ItemStack


def find_stack(stacks: list[ItemStack], item_id: str) -> ItemStack | None:
    for stack in stacks:
        if stack.item_id == item_id and stack.quantity > 0:
            return stack
    return None


def quantity_of(stacks: list[ItemStack], item_id: str) -> int:
    return sum(s.quantity for s in stacks if s.item_id == item_id)


def add_item(stacks: list[ItemStack], item_id: str, quantity: int = 1) -> ItemStack:
    """Add ``quantity`` of an item, merging into an existing stack."""
    if quantity <= 0:
        raise ValueError(f"Cannot add {quantity} of {item_id}")
    stack = find_stack(stacks, item_id)
    if stack is None:
        stack = ItemStack(item_id=item_id, quantity=0)
        stacks.append(stack)
    stack.quantity += quantity
    return stack


def remove_item(stacks: list[ItemStack], item_id: str, quantity: int = 1) -> bool:
    """Remove ``quantity`` of an item. Returns False (and changes nothing) if short."""
    if quantity <= 0:
        raise ValueError(f"Cannot remove {quantity} of {item_id}")
    if quantity_of(stacks, item_id) < quantity:
        return False

    remaining = quantity
    for stack in stacks:
        if stack.item_id != item_id or remaining == 0:
            continue
        taken = min(stack.quantity, remaining)
        stack.quantity -= taken
        remaining -= taken

    stacks[:] = [s for s in stacks if s.quantity > 0]
    return True

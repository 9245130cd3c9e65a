from __future__ import annotations

from collections.abc import Iterable, Sequence

from crypto_panel.types import SYMBOL_SLOTS, Validity


def fold(symbol: str) -> str:
    return symbol.strip().lower()


def classify(candidate: str, universe: Iterable[str]) -> Validity:
    """
    Classify a symbol input against the known universe.

    Empty when the trimmed input is blank, valid when it matches a universe
    entry case-insensitively, invalid otherwise.
    """
    folded = fold(candidate)
    if not folded:
        return Validity.EMPTY
    if folded in {fold(s) for s in universe}:
        return Validity.VALID
    return Validity.INVALID


def is_available(symbol: str, universe: Iterable[str]) -> bool:
    return classify(symbol, universe) is Validity.VALID


def apply_symbol_input(
    symbols: Sequence[str],
    *,
    index: int,
    candidate: str,
    universe: Iterable[str],
) -> tuple[list[str], Validity]:
    """
    Return the slot list after typing `candidate` into slot `index`.

    Valid input is stored folded, empty input clears the slot and invalid
    input keeps whatever the slot held before.
    """
    if not (0 <= index < SYMBOL_SLOTS):
        raise ValueError(f"symbol slot must be within [0, {SYMBOL_SLOTS - 1}], got {index}")

    validity = classify(candidate, universe)
    slots = list(symbols[:SYMBOL_SLOTS])
    if validity is Validity.INVALID:
        return slots, validity

    if validity is Validity.VALID:
        while len(slots) <= index:
            slots.append("")
        slots[index] = fold(candidate)
    elif index < len(slots):
        slots[index] = ""

    while slots and not slots[-1]:
        slots.pop()
    return slots, validity


def configured_symbols(symbols: Sequence[str]) -> list[str]:
    return [s for s in symbols[:SYMBOL_SLOTS] if s.strip()]

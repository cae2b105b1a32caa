"""
Positional distributor: attribute words to ordered slots under (min, max) bounds.

Every slot knows, from the slots before it:
- start_min: how many words earlier slots need at least (sum of their minimums);
- start_max: how many words earlier slots can take at most (sum of their bounded maximums).

The drift of a slot (start_max - start_min) is how many words earlier slots may still
absorb before this one starts collecting. Walking the words of a slot therefore
skips start_min words, hands the next `drift` words back to earlier slots, then
keeps words until its own maximum is reached.

Each slot is evaluated on its own from the bounds and the word count only, so
distribute() may fan evaluations out over an executor; results keep slot order.
"""
import itertools
from collections import namedtuple

Bound = namedtuple("Bound", ("slot", "index", "start_min", "start_max"))
Allocation = namedtuple("Allocation", ("slot", "index", "reached", "attributed", "open"))


def bounds(slots, /):
    """
    compute start_min/start_max for each slot, in order.

    unbounded maximums (-1) do not add to the running maximum, and start_max never
    drops below start_min.
    """
    result = []
    minimum = maximum = 0
    for index, slot in enumerate(slots):
        result.append(Bound(slot, index, minimum, max(maximum, minimum)))
        minimum += slot.minimum
        if not slot.unbounded():
            maximum += slot.maximum
    return tuple(result)


def allocate(bound, words, /):
    """
    evaluate one slot against `words` positional words.

    - reached: there are at least start_min words, so earlier slots may be satisfied.
    - attributed: words this slot keeps.
    - open: the slot can still take a word (unbounded, below its minimum or its maximum).
    """
    slot = bound.slot
    if words < bound.start_min:
        return Allocation(slot, bound.index, False, 0, False)

    remaining = words - bound.start_min
    drift = bound.start_max - bound.start_min

    if slot.unbounded():
        return Allocation(slot, bound.index, True, max(0, remaining - drift), True)

    attributed = 0
    while remaining and attributed < slot.maximum:
        if drift:
            drift -= 1
        else:
            attributed += 1
        remaining -= 1

    return Allocation(slot, bound.index, True, attributed, attributed < slot.minimum or attributed < slot.maximum)


def distribute(slots, words, /, executor=None):
    """
    allocate `words` across `slots`; returns one Allocation per slot in slot order.

    an optional concurrent.futures executor evaluates slots in parallel.
    """
    bounded = bounds(slots)
    if executor is None:
        return tuple(allocate(bound, words) for bound in bounded)
    return tuple(executor.map(allocate, bounded, itertools.repeat(words)))


def remaining(allocations, /):
    """
    allocations still able to absorb one more word, in slot order.
    """
    return tuple(
        allocation for allocation in allocations
        if allocation.slot.unbounded() or allocation.attributed < allocation.slot.maximum
    )


def completable(allocations, /):
    """
    allocations the builder should complete for: reached and still open.
    """
    return tuple(allocation for allocation in allocations if allocation.reached and allocation.open)


__all__ = (
    "Bound",
    "Allocation",
    "bounds",
    "allocate",
    "distribute",
    "remaining",
    "completable",
)

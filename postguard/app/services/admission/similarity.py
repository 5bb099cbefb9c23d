"""Edit-distance similarity between two strings."""


def levenshtein_distance(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute edit distance.

    Dynamic programming over a (len(b)+1) x (len(a)+1) table, keeping only
    the previous row.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(a) + 1))
    for i, char_b in enumerate(b, start=1):
        current = [i]
        for j, char_a in enumerate(a, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(
                    previous[j - 1] + 1,  # substitute
                    current[j - 1] + 1,   # insert
                    previous[j] + 1,      # delete
                ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Return 1 - distance / longest length, in [0, 1].

    Two empty strings are identical by convention.
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / longest


def bounded_levenshtein_distance(a: str, b: str, max_distance: int) -> int:
    """Edit distance, or ``max_distance + 1`` once it must exceed ``max_distance``.

    Only the diagonal band of width ``2 * max_distance + 1`` is computed, and
    the scan stops as soon as a whole row is over the bound.
    """
    over = max_distance + 1
    if abs(len(a) - len(b)) > max_distance:
        return over
    if a == b:
        return 0
    if not a or not b:
        return max(len(a), len(b))

    previous = [j if j <= max_distance else over for j in range(len(a) + 1)]
    for i, char_b in enumerate(b, start=1):
        current = [over] * (len(a) + 1)
        if i <= max_distance:
            current[0] = i
        row_min = current[0]
        for j in range(max(1, i - max_distance), min(len(a), i + max_distance) + 1):
            if a[j - 1] == char_b:
                cost = previous[j - 1]
            else:
                cost = min(previous[j - 1], current[j - 1], previous[j]) + 1
            if cost > over:
                cost = over
            current[j] = cost
            if cost < row_min:
                row_min = cost
        if row_min > max_distance:
            return over
        previous = current
    return previous[-1]

from typing import Optional, Set, Tuple, TypeVar

T = TypeVar('T')

# Largest suffix a generated name may carry before we give up.
MAX_SUFFIX = 2**32 - 1


def ensure(value: Optional[T], what: str = "Value") -> T:
    """Ensure a value is not None, raising RuntimeError if it is.

    Args:
        value: The value to check
        what: Name of the value, used in the error message

    Returns:
        The value if it is not None

    Raises:
        RuntimeError: If the value is None
    """
    if value is None:
        raise RuntimeError(f"{what} is None")
    return value


def unique_name(name: str, seen: Set[str], counter: int = 0) -> Tuple[str, int]:
    """Find a name not yet in ``seen`` by appending ``_1``, ``_2``, ...

    The chosen name is added to ``seen``. Returns the name and the last
    counter value used, so callers can keep counting across calls.

    Raises:
        OverflowError: If the counter passes MAX_SUFFIX
    """
    candidate = name
    while candidate in seen:
        counter += 1
        if counter > MAX_SUFFIX:
            raise OverflowError(f"no unused suffix left for {name!r}")
        candidate = f"{name}_{counter}"
    seen.add(candidate)
    return candidate, counter

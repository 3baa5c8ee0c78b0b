"""Package name validation for the sandbox installer."""

from dataclasses import dataclass, field
from typing import Any, List

from gateway.core.security.patterns import MAX_PACKAGE_NAME_LENGTH, PACKAGE_NAME_PATTERN


@dataclass
class PackageList:
    """Result of sanitizing a list of package names."""

    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)


def validate_package_name(name: Any) -> bool:
    """Check a single name (optionally scoped, optionally versioned)."""
    if not isinstance(name, str):
        return False
    trimmed = name.strip()
    if not trimmed or len(trimmed) > MAX_PACKAGE_NAME_LENGTH:
        return False
    return PACKAGE_NAME_PATTERN.match(trimmed) is not None


def sanitize_package_list(packages: Any) -> PackageList:
    """
    Deduplicate and partition package names into valid and invalid.

    Args:
        packages: Client supplied list of names

    Returns:
        PackageList, both partitions in first-seen order. Anything that is not
        a list yields an empty result instead of raising.

    Strings are trimmed and deduplicated. Non-string items are reported as
    invalid using their Python ``str()`` form (``None`` becomes ``"None"``)
    and are not deduplicated, so ``[None, None]`` reports two entries.
    """
    result = PackageList()
    if not isinstance(packages, (list, tuple)):
        return result

    seen = set()
    for package in packages:
        if not isinstance(package, str):
            result.invalid.append(str(package))
            continue

        trimmed = package.strip()
        if trimmed in seen:
            continue
        seen.add(trimmed)

        if validate_package_name(trimmed):
            result.valid.append(trimmed)
        else:
            result.invalid.append(trimmed)

    return result

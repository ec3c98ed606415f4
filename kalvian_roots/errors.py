"""Error taxonomy for family loading and resolution.

The first three errors are hard failures when they concern the family the
caller asked for. During cross-reference resolution the resolver wraps them
in ``Unresolvable`` and drops the branch.
"""


class RootsError(Exception):
    """Base class for all Kalvian Roots errors."""


class InvalidIdentifier(RootsError):
    """The family identifier is not in the family ID registry."""

    def __init__(self, family_id: str):
        self.family_id = family_id
        super().__init__(f"Invalid family ID: {family_id!r}")


class NotFound(RootsError):
    """The corpus has no text block for the family identifier."""

    def __init__(self, family_id: str):
        self.family_id = family_id
        super().__init__(f"Family {family_id!r} not found in corpus")


class ParseFailure(RootsError):
    """The family text could not be turned into a Family record."""

    def __init__(self, family_id: str, reason: str):
        self.family_id = family_id
        self.reason = reason
        super().__init__(f"Could not parse family {family_id!r}: {reason}")


class Unresolvable(RootsError):
    """A linked family referenced from another family could not be resolved."""

    def __init__(self, reference: str, cause: RootsError):
        self.reference = reference
        self.cause = cause
        super().__init__(f"Cross-reference {reference!r} unresolvable: {cause}")


class HiskiError(RootsError):
    """A HisKi church record lookup failed."""


class HiskiRecordNotFound(HiskiError):
    """HisKi returned no record matching the searched date."""

    def __init__(self, search_url: str, date: str):
        self.search_url = search_url
        self.date = date
        super().__init__(f"No HisKi record found for {date}")

"""Value objects for the Branch bounded context."""

from __future__ import annotations

from dataclasses import dataclass

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class ScannerBranchMetadata:
    """Branch metadata as declared by the scanner report.

    Values arrive raw; blank strings mean "not supplied". ``branch_type`` is
    kept as the scanner sent it so unsupported values can be reported.
    """

    branch_name: str | None = None
    branch_type: str | None = None
    reference_branch_name: str | None = None
    target_branch_name: str | None = None
    pull_request_key: str | None = None


@dataclass(frozen=True)
class ProjectRoot:
    """The project an analysis belongs to."""

    uuid: str
    key: str
    name: str
    qualifier: str = "TRK"

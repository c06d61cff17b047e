"""Branch insertion: insertion points, step-transfer analysis, validation, layout, application."""

from flowbranch.branching.apply import (
    BranchInserter,
    BranchInsertionError,
    InsertionResult,
    insert_branch,
    insertion_result_to_dict,
)
from flowbranch.branching.insertion import (
    BranchInsertionPoint,
    accepts_branch,
    detect_insertion_points,
    insertion_point_to_dict,
    is_insertion_point_valid,
    prune_insertion_points,
    update_insertion_point_positions,
)
from flowbranch.branching.layout import calculate_transfer_positions
from flowbranch.branching.transfer import (
    StepAnalysisResult,
    analyze_transfer,
    step_analysis_to_dict,
)
from flowbranch.branching.validation import (
    EdgeValidation,
    TransferValidation,
    find_cycles,
    validate_edge_connections,
    validate_transfer,
)

__all__ = [
    "BranchInserter",
    "BranchInsertionError",
    "BranchInsertionPoint",
    "EdgeValidation",
    "InsertionResult",
    "StepAnalysisResult",
    "TransferValidation",
    "accepts_branch",
    "analyze_transfer",
    "calculate_transfer_positions",
    "detect_insertion_points",
    "find_cycles",
    "insert_branch",
    "insertion_point_to_dict",
    "insertion_result_to_dict",
    "is_insertion_point_valid",
    "prune_insertion_points",
    "step_analysis_to_dict",
    "update_insertion_point_positions",
    "validate_edge_connections",
    "validate_transfer",
]

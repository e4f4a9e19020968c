from __future__ import annotations

from typing import Any

from .schemas import ReconstructionResult

FALLBACK_PAYLOAD: dict[str, Any] = {
    "process_overview": {
        "process_name": "Quality Control Inspection Log",
        "role": "Quality Assurance Technician",
        "system_type": "QMS (Quality Management System)",
        "goal": "Log and verify visual inspection results for Batch #4092",
        "assumptions": ["User has already logged in", "Batch record exists"],
    },
    "steps": [
        {
            "step": 1,
            "title": "Access Inspection Module",
            "instruction": "Navigate to the 'Quality Control' tab and select 'Daily Inspection Log' from the dropdown menu.",
        },
        {
            "step": 2,
            "title": "Locate Batch Record",
            "instruction": "Enter '4092' in the Batch ID search field and press Enter to retrieve the record.",
        },
        {
            "step": 3,
            "title": "Enter Visual Defects",
            "instruction": "In the 'Visual Inspection' section, input '0' for major defects and '2' for minor cosmetic scratches.",
        },
        {
            "step": 4,
            "title": "Verify & Submit",
            "instruction": "Review the summary statistics, check the 'Verified by Operator' box, and click the green 'Commit Log' button.",
        },
    ],
    "checks_and_risks": {
        "checks": ["Ensure Batch ID matches physical traveler card", "Verify user certification is active"],
        "risks": ["Session timeout if data entry takes too long", "Incorrect defect classification"],
    },
    "execution_checklist": [
        "Open QC Module",
        "Search Batch #4092",
        "Log defects (0 major, 2 minor)",
        "Submit record",
    ],
    "loom_script": [
        {
            "step": 1,
            "narration": "First, the operator navigates to the Quality Control module to begin the daily logging process.",
            "focus": "Top navigation bar, Quality Control tab",
        },
        {
            "step": 2,
            "narration": "They efficiently locate the specific production batch by entering the ID into the quick search field.",
            "focus": "Search bar, Batch ID input",
        },
        {
            "step": 3,
            "narration": "Critical quality data is entered here. Notice how they distinguish between major and minor defects.",
            "focus": "Data entry form, visual inspection fields",
        },
        {
            "step": 4,
            "narration": "Finally, the record is verified and committed to the system, completing the audit trail.",
            "focus": "Submit button, success toast notification",
        },
    ],
}


def fallback_result() -> ReconstructionResult:
    # A fresh instance per call so callers can never mutate the shared payload.
    return ReconstructionResult.model_validate(FALLBACK_PAYLOAD)

"""Schema definitions for the chest X-ray reporting tool."""

from typing import Any, Dict

from models.analysis_result import DIAGNOSIS_VALUES, SEVERITY_VALUES

FUNCTION_NAME = "report_chest_xray_findings"

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": (
        "Return the diagnosis, confidence, severity, findings and recommendation for the chest X-ray."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "diagnosis": {
                "type": "string",
                "enum": DIAGNOSIS_VALUES,
            },
            "confidence": {
                "type": "number",
                "description": "Confidence percentage from 0 to 100",
            },
            "severity": {
                "type": "string",
                "enum": SEVERITY_VALUES,
            },
            "findings": {
                "type": "array",
                "items": {"type": "string"},
                "description": "List of specific visual findings (e.g., 'Right lower lobe consolidation')",
            },
            "recommendation": {
                "type": "string",
                "description": "Clinical recommendation based on findings",
            },
        },
        "required": ["diagnosis", "confidence", "severity", "findings", "recommendation"],
        "additionalProperties": False,
    },
    "strict": True,
}

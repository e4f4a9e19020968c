from __future__ import annotations

import json

_RESULT_SHAPE = {
    "process_overview": {
        "process_name": "string",
        "role": "string",
        "system_type": "string",
        "goal": "string",
        "assumptions": ["string"],
    },
    "steps": [{"step": "number", "title": "string", "instruction": "string"}],
    "checks_and_risks": {"checks": ["string"], "risks": ["string"]},
    "execution_checklist": ["string"],
    "loom_script": [{"step": "number", "narration": "string", "focus": "string"}],
}


def result_shape_block() -> str:
    return json.dumps(_RESULT_SHAPE, indent=2)


def reconstruction_prompt(image_count: int, context: str | None = None) -> str:
    plural = "s" if image_count > 1 else ""
    context_block = f'Additional user context: "{context.strip()}"\n\n' if context and context.strip() else ""
    return (
        "You are an AI assistant for industrial engineers.\n\n"
        f"You are given {image_count} screenshot{plural} of legacy industrial software (MES, ERP, or QMS).\n"
        "The screenshots are in sequence and represent one continuous workflow being performed.\n"
        "Your task is to reconstruct the complete workflow from these real industrial artifacts\n"
        "and turn it into an action-ready SOP and a short Loom-style walkthrough.\n\n"
        "From the screenshot(s), infer across ALL screens together, not per image:\n"
        "- Process being performed\n"
        "- Role performing it\n"
        "- Goal of the process\n"
        "- How each screenshot connects to form a complete workflow\n\n"
        f"{context_block}"
        "Then produce:\n\n"
        "1. Process overview (process name, role, system type, goal, assumptions)\n"
        "2. Step-by-step instructions (one action per step, operational language)\n"
        "   - Reference which screenshot each step corresponds to when relevant\n"
        "3. Checks & risks (approvals, compliance, common failure points)\n"
        "4. Execution checklist (concise, actionable)\n"
        "5. Loom-style walkthrough script:\n"
        "   - For each step: 1-2 sentences narration\n"
        "   - What the viewer should focus on in the screen\n\n"
        "Constraints:\n"
        "- Do not assume APIs, integrations or automation\n"
        "- Do not assume live screen recording\n"
        "- Base reasoning only on visible information\n"
        "- Explicitly state assumptions\n"
        "- Be concise and execution-focused\n\n"
        "Return ONLY strict JSON matching this shape exactly, with no prose and no markdown fences:\n\n"
        f"{result_shape_block()}\n"
    )


def single_screenshot_prompt() -> str:
    return (
        "You are a senior Industrial Engineer specializing in process optimization and legacy system migration.\n"
        "Analyze the attached screenshot from an industrial software interface (MES, ERP, QMS, or similar).\n\n"
        "Tasks:\n"
        "1. Identify the core process being performed.\n"
        "2. Determine the role of the operator.\n"
        "3. Reconstruct the operational sequence.\n"
        "4. Highlight compliance and safety risks.\n\n"
        "If the image is not legacy industrial software (e.g., a modern design site), treat it as a "
        "'System Navigation Training' process for that specific UI.\n\n"
        "Do not assume APIs, automation or live screen recording, and state your assumptions explicitly.\n"
        "Return ONLY strict JSON matching this shape:\n\n"
        f"{result_shape_block()}\n"
    )

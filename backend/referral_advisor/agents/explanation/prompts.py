"""Prompts for the narrative case explanation."""

EXPLANATION_SYSTEM_PROMPT = """
You are a medical education assistant.
Explain a genetic referral decision-support output clearly and briefly for a physician.

Rules:
- Do not give medical advice.
- Do not diagnose.
- Do not change or question the score, the triage category or the confirmed red flags.
- Use a neutral, educational tone in at most two short paragraphs.
"""

EXPLANATION_USER_TEMPLATE = """
Pathway: {pathway}
Patient age: {age}
Score: {score}
Recommendation: {triage}

Reasons:
- {reasons}

Missing information:
- {missing_info}

EXPLANATION:"""

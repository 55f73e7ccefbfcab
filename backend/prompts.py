# prompts.py
"""Prompt text sent to the model for summaries and quiz questions."""

DIFFICULTY_GUIDANCE = {
    "EASY": "straightforward recall questions about facts stated in the summary",
    "MEDIUM": "questions requiring applied understanding and basic analysis of the ideas",
    "HARD": "questions requiring deep analysis and critical thinking across several ideas",
}

QUIZ_PROMPT_MD = """Requirements:
- Each question must have exactly 4 options
- Only ONE option should be correct
- Include a brief explanation for the correct answer
- Questions should test understanding, not just memorization

CRITICAL: Return ONLY a valid JSON array. Do not include any explanation, introduction, or text outside the JSON.
Use this exact structure:
[
  {
    "id": "q1",
    "question": "Question text here?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": "Option B",
    "explanation": "Brief explanation of why this is correct"
  }
]

Ensure:
- All strings are properly quoted with double quotes
- Question ids are "q1", "q2", ... in order and never repeat
- correctAnswer must exactly match one of the options
- No trailing commas
- Valid JSON syntax
"""

SUMMARY_PROMPT_MD = """Please provide a comprehensive and structured summary of the following document.
Focus on key points, main arguments, and important details.
Format the summary in clear, readable markdown with appropriate sections.
"""


def build_quiz_prompt(summary_text: str, difficulty: str, count: int) -> str:
    level = difficulty.upper()
    return f"""Generate exactly {count} multiple-choice questions based on the following document summary.
Difficulty level: {level}
For {level}: {DIFFICULTY_GUIDANCE[level]}

{QUIZ_PROMPT_MD}
Document summary:
{summary_text}
"""


def build_summary_prompt(document_text: str) -> str:
    return f"""{SUMMARY_PROMPT_MD}
Document text:
{document_text}
"""

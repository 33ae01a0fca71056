from __future__ import annotations

from .types import Question

SYSTEM_PROMPT = """You are answering questions about a real-world event for a prediction quiz app. The user will give you:
1. A quiz title that describes the event (e.g., "Celtics vs Mavericks - February 3, 2026")
2. A list of questions about that event

Your task is to provide the ACTUAL RESULTS of this event. Use web search to find the real outcomes.

For each question, provide:
- The correct answer based on the actual event results
- A confidence level (0.0 to 1.0):
  - 0.95: You found verified results from reliable sources
  - 0.7-0.8: You found results but want user to verify
  - 0.4-0.6: You found partial information
  - 0.0: Event hasn't happened yet or no results found
- A brief reason explaining where you found this information

For multiple-choice questions, you MUST pick one of the provided options exactly as written.
For open-ended questions, provide a concise factual answer.

IMPORTANT:
- Search the web for actual event results, scores, winners, statistics
- If this is a sports game, find the final score and game stats
- If this is an awards show, find the actual winners
- Only set confidence to 0 if the event genuinely hasn't happened yet

Respond with valid JSON only, no markdown:
{
  "answers": [
    {
      "questionId": "string",
      "answer": "string",
      "confidence": number,
      "reason": "string"
    }
  ]
}"""

TEMPLATE = (
    'Quiz: "{quiz_title}"\n\n'
    "Questions:\n"
    "{questions_text}\n\n"
    "Answer each question based on your knowledge of this event."
)


def render_question(index: int, question: Question) -> str:
    line = f"{index}. [ID: {question.id}] {question.text}"
    if question.is_multiple_choice:
        return line + f"\n   Options: {' | '.join(question.options)}"
    return line + "\n   (Open-ended answer)"


def render_prompt(quiz_title: str, questions: list[Question]) -> str:
    questions_text = "\n\n".join(
        render_question(i, q) for i, q in enumerate(questions, start=1)
    )
    return TEMPLATE.format(quiz_title=quiz_title, questions_text=questions_text)

"""Quiz Templates - Prompts e templates de fallback para geracao de questoes."""

# =============================================================================
# SYSTEM PROMPT
# =============================================================================

QUIZ_SYSTEM_PROMPT = """You are a quiz question generator for a study platform. Respond ONLY with valid JSON, no additional text."""

# =============================================================================
# PROMPT TEMPLATES
# =============================================================================

QUIZ_GENERATION_PROMPT = """Create {question_count} {difficulty} level multiple choice quiz questions about {topic}.

Requirements:
- Each question should test understanding of {topic} concepts
- Provide 4 options for each question
- Exactly one option is correct; the others must be plausible but wrong
- Include a detailed explanation for the correct answer
- Make questions challenging but fair for {difficulty} level

Return ONLY a valid JSON array:
[
  {{
    "question": "What is the primary purpose of...?",
    "options": ["Option A", "Option B", "Option C", "Option D"],
    "correctAnswer": 0,
    "explanation": "Detailed explanation of why this answer is correct"
  }}
]

Generate exactly {question_count} questions."""


# =============================================================================
# FALLBACK TEMPLATES
# =============================================================================

# Usados quando a IA falha; as questoes geradas ficam marcadas com ai_generated=False
FALLBACK_QUESTION_TEMPLATE = "What is an important {difficulty} level concept in {topic}?"

FALLBACK_OPTION_TEMPLATES = [
    "Correct answer about {topic} concept {number}",
    "Incorrect option A for {topic}",
    "Incorrect option B for {topic}",
    "Incorrect option C for {topic}",
]

FALLBACK_EXPLANATION_TEMPLATE = (
    "This is correct because it represents a fundamental {difficulty} level concept in {topic}."
)

DEFAULT_EXPLANATION = "Explanation not provided"

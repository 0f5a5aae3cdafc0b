"""Prompt composition for entry-sheet questions.

Pure functions: no I/O, same inputs always give the same prompt.

Usage:
    prompt = compose_prompt(profile, "Why this company?", language="ja")
"""

from eswriter.models import UserProfile

# Background prose built from the profile, by language
_PROFILE_TEMPLATES = {
    "ja": "{bio}です。今までの経験は{experience}です。これまでに作ってきた作品は{projects}",
    "en": "{bio}. Your experience so far: {experience}. Things you have built: {projects}",
}

# Answering instructions by language. Output must be bare prose: the
# extension pastes it straight into form fields.
_INSTRUCTION_TEMPLATES = {
    "ja": (
        "あなたの経歴は{background}です。以下の質問に答えてください。"
        "簡潔かつ具体的に記述し、#や*,-などは使用せずに平文で解答部分のみを出力してください。\n"
        "{question}"
    ),
    "en": (
        "Your background: {background}. Answer the question below as this person. "
        "Be concise and specific, write plain prose without markdown or list markers "
        "such as #, * or -, and output only the answer itself.\n"
        "{question}"
    ),
}


def compose_background(profile: UserProfile, language: str = "ja") -> str:
    """Render the profile as free prose."""
    template = _PROFILE_TEMPLATES.get(language, _PROFILE_TEMPLATES["ja"])
    return template.format(
        bio=profile.bio.strip(),
        experience=profile.experience.strip(),
        projects=profile.projects.strip(),
    )


def compose_prompt(profile: UserProfile, question: str, language: str = "ja") -> str:
    """Combine a profile and one question into a completion prompt.

    Args:
        profile: Caller's profile (not modified)
        question: Question text, appended last
        language: 'ja' or 'en'; unknown values fall back to 'ja'

    Returns:
        Prompt string
    """
    template = _INSTRUCTION_TEMPLATES.get(language, _INSTRUCTION_TEMPLATES["ja"])
    return template.format(
        background=compose_background(profile, language),
        question=question,
    )

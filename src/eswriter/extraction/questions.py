"""Question extraction from application form markup.

Strips non-content noise (scripts, styles, navigation boilerplate) and then
walks the form controls in document order, resolving the text that labels
each one. That text is the question.

Label resolution order per control:
    1. <label for="control-id">
    2. an enclosing <label> (minus the control's own text)
    3. aria-labelledby
    4. aria-label, placeholder, title attributes

Usage:
    questions = extract_questions(html)
    for q in questions:
        print(q.index, q.text)
"""

import logging

from bs4 import BeautifulSoup, Comment, Tag

from eswriter.models import Question

logger = logging.getLogger(__name__)

_NOISE_TAGS = [
    "script", "style", "noscript", "template", "svg",
    "nav", "header", "footer", "aside", "iframe",
]
_CONTROL_TAGS = ["textarea", "select", "input"]
# Missing type attribute means text
_TEXT_INPUT_TYPES = {
    "", "text", "email", "tel", "url", "number", "search", "date", "month",
}
_LABEL_ATTRIBUTES = ("aria-label", "placeholder", "title")


def _parse(html: str) -> BeautifulSoup:
    """Parse markup and drop non-content tags and comments in place."""
    soup = BeautifulSoup(html or "", "html.parser")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return soup


def _normalize(text: str | None) -> str:
    return " ".join((text or "").split())


def _is_answerable(control: Tag) -> bool:
    if control.name != "input":
        return True
    input_type = (control.get("type") or "").strip().lower()
    return input_type in _TEXT_INPUT_TYPES


def _label_text(label: Tag) -> str:
    """Text of a label, skipping text that belongs to nested controls."""
    parts = [
        s for s in label.find_all(string=True)
        if s.find_parent(["textarea", "select"]) is None
    ]
    return _normalize(" ".join(parts))


def _resolve_question(
    control: Tag,
    soup: BeautifulSoup,
    labels_by_target: dict[str, Tag],
) -> str:
    control_id = control.get("id")
    if control_id and control_id in labels_by_target:
        text = _label_text(labels_by_target[control_id])
        if text:
            return text

    enclosing = control.find_parent("label")
    if enclosing is not None:
        text = _label_text(enclosing)
        if text:
            return text

    labelledby = control.get("aria-labelledby")
    if labelledby:
        referenced = [soup.find(id=ref) for ref in labelledby.split()]
        text = _normalize(" ".join(
            el.get_text(" ") for el in referenced if el is not None
        ))
        if text:
            return text

    for attribute in _LABEL_ATTRIBUTES:
        text = _normalize(control.get(attribute))
        if text:
            return text

    return ""


def clean_html(html: str) -> str:
    """Return the markup with non-content tags removed.

    Returns an empty string if the markup cannot be parsed at all.
    """
    try:
        return str(_parse(html))
    except Exception as e:
        logger.warning("Failed to clean HTML: %s", e)
        return ""


def extract_questions(html: str) -> list[Question]:
    """Extract form questions in document order.

    Duplicates are kept. Malformed or unclosed markup never raises; whatever
    could be recovered is returned, possibly an empty list.

    Args:
        html: Raw form markup

    Returns:
        Questions indexed 0..n-1 in document order
    """
    try:
        soup = _parse(html)
    except Exception as e:
        logger.warning("Failed to parse HTML, no questions recovered: %s", e)
        return []

    labels_by_target: dict[str, Tag] = {}
    for label in soup.find_all("label"):
        target = label.get("for")
        if target and target not in labels_by_target:
            labels_by_target[target] = label

    questions: list[Question] = []
    for control in soup.find_all(_CONTROL_TAGS):
        if not _is_answerable(control):
            continue
        text = _resolve_question(control, soup, labels_by_target)
        if not text:
            logger.debug("Skipping unlabeled <%s> control", control.name)
            continue
        questions.append(Question(text=text, index=len(questions)))

    logger.debug("Extracted %d questions", len(questions))
    return questions
